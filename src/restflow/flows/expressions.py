"""Parser for assertion and capture expressions.

An expression is ``<path> <operator> <literal>`` for binary operators and
``<path> exists`` / ``<path> not_exists`` for unary ones, e.g.::

    status == 200
    headers.content-type contains "json"
    body.items[0].id exists
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from restflow.flows.errors import ExpressionParseError


class ComparisonOperator(str, Enum):
    """Operators understood by the assertion evaluator."""

    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    MATCHES = "matches"
    NOT_MATCHES = "not_matches"
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"

    @property
    def is_unary(self) -> bool:
        return self in (ComparisonOperator.EXISTS, ComparisonOperator.NOT_EXISTS)


@dataclass(frozen=True)
class ParsedAssertion:
    """An expression split into its path, operator and literal."""

    left: str
    operator: ComparisonOperator
    right: Any


class ExpressionParser:
    """Splits expressions on the first operator found in priority order."""

    # Longer tokens come first so that ``not_exists`` wins over ``exists``
    # and ``>=`` wins over ``>``.
    OPERATORS: tuple[ComparisonOperator, ...] = (
        ComparisonOperator.NOT_CONTAINS,
        ComparisonOperator.NOT_MATCHES,
        ComparisonOperator.NOT_EXISTS,
        ComparisonOperator.GE,
        ComparisonOperator.LE,
        ComparisonOperator.NE,
        ComparisonOperator.EQ,
        ComparisonOperator.GT,
        ComparisonOperator.LT,
        ComparisonOperator.CONTAINS,
        ComparisonOperator.MATCHES,
        ComparisonOperator.EXISTS,
    )

    NUMBER_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")

    def parse(self, expression: str) -> ParsedAssertion:
        """Parse an expression.

        Args:
            expression: Expression text, surrounding whitespace is ignored.

        Returns:
            The parsed assertion.

        Raises:
            ExpressionParseError: If no operator occurs after a non-empty left side.
        """
        trimmed = expression.strip()

        for operator in self.OPERATORS:
            index = trimmed.find(operator.value)
            if index > 0:
                left = trimmed[:index].strip()
                right = trimmed[index + len(operator.value) :].strip()
                return ParsedAssertion(left=left, operator=operator, right=self.parse_value(right))

        raise ExpressionParseError(expression)

    def parse_value(self, value: str) -> Any:
        """Convert the right-hand side of an expression into a literal."""
        trimmed = value.strip()

        if (trimmed.startswith('"') and trimmed.endswith('"')) or (
            trimmed.startswith("'") and trimmed.endswith("'")
        ):
            return trimmed[1:-1]

        if trimmed == "true":
            return True
        if trimmed == "false":
            return False
        if trimmed == "null":
            return None

        if self.NUMBER_PATTERN.match(trimmed):
            if "." in trimmed:
                return float(trimmed)
            return int(trimmed)

        return trimmed


def parse_expression(expression: str) -> ParsedAssertion:
    """Convenience function to parse a single expression."""
    return ExpressionParser().parse(expression)
