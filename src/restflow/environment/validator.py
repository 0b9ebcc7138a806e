"""Validation of environment variables against declared rules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field


@dataclass
class ValidationRule:
    """Constraints on a single environment variable."""

    key: str
    required: bool = False
    type: str | None = None  # "string", "number", "boolean"
    pattern: str | re.Pattern[str] | None = None
    allowed_values: list[str] | None = None
    description: str | None = None


@dataclass
class ValidationIssue:
    key: str
    message: str
    rule: ValidationRule


@dataclass
class ValidationResult:
    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)


BOOLEAN_VALUES = frozenset({"true", "false", "1", "0", "yes", "no"})


class EnvValidator:
    """Checks variables for presence, type, pattern and allowed values."""

    def validate(self, env: dict[str, str], rules: list[ValidationRule]) -> ValidationResult:
        """Validate ``env`` against ``rules``.

        A variable that is absent or empty is only reported when the rule
        marks it as required.
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        for rule in rules:
            value = env.get(rule.key)

            if not value:
                if rule.required:
                    errors.append(
                        ValidationIssue(rule.key, f"Required environment variable '{rule.key}' is missing", rule)
                    )
                continue

            if rule.type and not self._validate_type(value, rule.type):
                errors.append(
                    ValidationIssue(rule.key, f"Environment variable '{rule.key}' must be of type {rule.type}", rule)
                )

            if rule.pattern is not None and not re.search(rule.pattern, value):
                errors.append(
                    ValidationIssue(rule.key, f"Environment variable '{rule.key}' does not match required pattern", rule)
                )

            if rule.allowed_values and value not in rule.allowed_values:
                errors.append(
                    ValidationIssue(
                        rule.key,
                        f"Environment variable '{rule.key}' must be one of: {', '.join(rule.allowed_values)}",
                        rule,
                    )
                )

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def _validate_type(self, value: str, type_name: str) -> bool:
        if type_name == "number":
            try:
                float(value)
            except ValueError:
                return False
            return True
        if type_name == "boolean":
            return value.lower() in BOOLEAN_VALUES
        return True


COMMON_RULES = [
    ValidationRule(
        key="BASE_URL",
        pattern=r"^https?://.+",
        description="Base URL prepended to relative request URLs",
    ),
    ValidationRule(key="PORT", type="number", description="Server port number"),
    ValidationRule(key="API_URL", pattern=r"^https?://.+", description="API base URL"),
]
