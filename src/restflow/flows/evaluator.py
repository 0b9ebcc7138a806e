"""Assertion evaluation against HTTP responses.

The evaluator never raises: parse and extraction problems are reported on
the returned :class:`AssertionResult`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from restflow.core import NOT_SET, strict_equals, stringify, to_number
from restflow.flows.errors import AssertionEvaluationError
from restflow.flows.expressions import ComparisonOperator, ExpressionParser
from restflow.flows.extractor import ValueExtractor
from restflow.flows.models import HttpResponse

# Left-hand paths that always read the response, even if a variable of the
# same name exists.
RESPONSE_PATHS = frozenset({"status", "statusText", "responseTime", "body", "headers", "cookies"})

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_]\w*$")


@dataclass
class AssertionResult:
    """Result of evaluating a single expression."""

    expression: str
    passed: bool
    actual: Any
    expected: Any
    operator: ComparisonOperator
    error: str | None = None

    @property
    def message(self) -> str:
        if self.passed:
            return ""
        if self.error:
            return f"Assertion failed: {self.error}"
        return f"Assertion failed: expected {stringify(self.expected)}, got {stringify(self.actual)}"


def is_variable_reference(path: str, variables: dict[str, Any] | None) -> bool:
    """Check whether a left-hand path names a context variable."""
    return (
        bool(variables)
        and path not in RESPONSE_PATHS
        and IDENTIFIER_PATTERN.match(path) is not None
        and path in variables
    )


class AssertionEvaluator:
    """Evaluates expressions such as ``status == 200`` against a response."""

    def __init__(
        self,
        parser: ExpressionParser | None = None,
        extractor: ValueExtractor | None = None,
    ) -> None:
        self.parser = parser or ExpressionParser()
        self.extractor = extractor or ValueExtractor()

    def evaluate(
        self,
        expression: str,
        response: HttpResponse,
        variables: dict[str, Any] | None = None,
    ) -> AssertionResult:
        """Evaluate an expression.

        Args:
            expression: The assertion expression.
            response: Response to read values from.
            variables: Execution variables; a bare identifier on the left side
                that names one of them is read from here instead of the response.

        Returns:
            AssertionResult; on any failure ``passed`` is false and ``error`` is set.
        """
        try:
            parsed = self.parser.parse(expression)
            if is_variable_reference(parsed.left, variables):
                actual = variables[parsed.left]  # type: ignore[index]
            else:
                actual = self.extractor.extract(parsed.left, response)
            passed = self.compare(actual, parsed.operator, parsed.right)
        except Exception as e:
            return AssertionResult(
                expression=expression,
                passed=False,
                actual=NOT_SET,
                expected=NOT_SET,
                operator=ComparisonOperator.EQ,
                error=str(e),
            )

        return AssertionResult(
            expression=expression,
            passed=passed,
            actual=actual,
            expected=parsed.right,
            operator=parsed.operator,
        )

    def compare(self, actual: Any, operator: ComparisonOperator, expected: Any) -> bool:
        """Apply an operator to an actual and an expected value."""
        if operator == ComparisonOperator.EQ:
            return strict_equals(actual, expected)
        if operator == ComparisonOperator.NE:
            return not strict_equals(actual, expected)
        if operator == ComparisonOperator.GT:
            return to_number(actual) > to_number(expected)
        if operator == ComparisonOperator.GE:
            return to_number(actual) >= to_number(expected)
        if operator == ComparisonOperator.LT:
            return to_number(actual) < to_number(expected)
        if operator == ComparisonOperator.LE:
            return to_number(actual) <= to_number(expected)
        if operator == ComparisonOperator.CONTAINS:
            return self._contains(actual, expected)
        if operator == ComparisonOperator.NOT_CONTAINS:
            return not self._contains(actual, expected)
        if operator == ComparisonOperator.MATCHES:
            return self._matches(actual, expected)
        if operator == ComparisonOperator.NOT_MATCHES:
            return not self._matches(actual, expected)
        if operator == ComparisonOperator.EXISTS:
            return actual is not NOT_SET and actual is not None
        if operator == ComparisonOperator.NOT_EXISTS:
            return actual is NOT_SET or actual is None
        raise AssertionEvaluationError(f"Unknown operator: {operator}")

    def _contains(self, actual: Any, expected: Any) -> bool:
        if isinstance(actual, str):
            return stringify(expected) in actual
        if isinstance(actual, list):
            return any(strict_equals(item, expected) for item in actual)
        if isinstance(actual, dict):
            return stringify(expected) in actual
        return False

    def _matches(self, actual: Any, expected: Any) -> bool:
        try:
            pattern = re.compile(stringify(expected))
        except re.error:
            return False
        return pattern.search(stringify(actual)) is not None


def evaluate_assertion(expression: str, response: HttpResponse) -> AssertionResult:
    """Convenience function to evaluate a single expression."""
    return AssertionEvaluator().evaluate(expression, response)
