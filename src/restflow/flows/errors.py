"""Error classes for the flow engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from restflow.flows.models import FlowResult, HttpRequest


class FlowError(Exception):
    """Base exception for flow errors."""

    def __init__(self, message: str, step_name: str | None = None) -> None:
        self.message = message
        self.step_name = step_name
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.step_name:
            return f"step '{self.step_name}': {self.message}"
        return self.message


class FlowParseError(FlowError):
    """Raised when a section of a flow file cannot be parsed."""

    def __init__(self, message: str, file_path: str | None = None) -> None:
        self.file_path = file_path
        super().__init__(message)

    def _format_message(self) -> str:
        if self.file_path:
            return f"{self.file_path}: {self.message}"
        return self.message


class ExpressionParseError(FlowError):
    """Raised when an assertion or capture expression has no known operator."""

    def __init__(self, expression: str, message: str | None = None) -> None:
        self.expression = expression
        super().__init__(message or f"Invalid assertion expression: {expression}")


class ValueExtractionError(FlowError):
    """Raised when a JSONPath query against a response is malformed."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Failed to extract value from path '{path}': {message}")


class AssertionEvaluationError(FlowError):
    """Raised when an assertion uses an operator the evaluator does not know."""

    pass


class VariableError(FlowError):
    """Raised when a placeholder names a variable that is not defined."""

    def __init__(self, variable_name: str, step_name: str | None = None) -> None:
        self.variable_name = variable_name
        super().__init__(f"Variable '{variable_name}' is not defined", step_name)


class HttpError(FlowError):
    """Raised when the HTTP transport cannot produce a response."""

    def __init__(
        self,
        message: str,
        request: HttpRequest | None = None,
        response_time: float = 0.0,
        cause: BaseException | None = None,
    ) -> None:
        self.request = request
        self.response_time = response_time
        self.cause = cause
        super().__init__(message)


class FlowExecutionError(FlowError):
    """Raised when flow orchestration fails outside step-level handling.

    Carries whatever result had been collected before the failure.
    """

    def __init__(self, message: str, flow_result: FlowResult | None = None, cause: Any = None) -> None:
        self.flow_result = flow_result
        self.cause = cause
        super().__init__(message)
