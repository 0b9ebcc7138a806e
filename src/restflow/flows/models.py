"""Data models for flows and their execution results.

Flow definitions are immutable pydantic models produced by the parser.
Execution artifacts are dataclasses produced by the executor and the HTTP
transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from restflow.core import NOT_SET


class HttpMethod(str, Enum):
    """HTTP methods accepted in a request line."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in cls._value2member_map_


class HttpRequest(BaseModel):
    """A request as written in a flow file, or its resolved copy."""

    method: HttpMethod
    url: str
    headers: dict[str, str] | None = None
    body: str | None = None
    timeout: float | None = None

    model_config = {"extra": "forbid", "frozen": True}


class CaptureDirective(BaseModel):
    """Extract a value from the response and store it as a variable."""

    type: Literal["capture"] = "capture"
    variable: str
    expression: str

    model_config = {"extra": "forbid", "frozen": True}


class AssertDirective(BaseModel):
    """Check a condition against the response."""

    type: Literal["assert"] = "assert"
    expression: str

    model_config = {"extra": "forbid", "frozen": True}


class ConsoleDirective(BaseModel):
    """Render a value from the response or the variables for diagnostics."""

    type: Literal["console"] = "console"
    expression: str

    model_config = {"extra": "forbid", "frozen": True}


Directive = Annotated[
    Union[CaptureDirective, AssertDirective, ConsoleDirective],
    Field(discriminator="type"),
]


class FlowStep(BaseModel):
    """A named request followed by its directives, in source order."""

    name: str
    request: HttpRequest
    directives: list[Directive] = Field(default_factory=list)

    model_config = {"extra": "forbid", "frozen": True}


class Flow(BaseModel):
    """An ordered sequence of steps."""

    name: str | None = None
    steps: list[FlowStep] = Field(default_factory=list)

    model_config = {"extra": "forbid", "frozen": True}


@dataclass(frozen=True)
class HttpResponse:
    """A response as returned by the HTTP transport.

    ``headers`` values are strings, except repeated ``set-cookie`` headers
    which are kept as a list. ``response_time`` is in milliseconds.
    """

    status: int
    status_text: str = ""
    headers: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    response_time: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "statusText": self.status_text,
            "headers": dict(self.headers),
            "body": self.body,
            "responseTime": round(self.response_time, 2),
        }


@dataclass
class ExecutionContext:
    """Variables and responses accumulated during one flow run."""

    variables: dict[str, Any] = field(default_factory=dict)
    responses: list[HttpResponse] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "variables": dict(self.variables),
            "responses": [r.to_dict() for r in self.responses],
        }


@dataclass
class DirectiveResult:
    """Outcome of a single directive."""

    directive: CaptureDirective | AssertDirective | ConsoleDirective
    success: bool
    error: str | None = None
    captured_value: Any = NOT_SET
    console_output: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.directive.type,
            "expression": self.directive.expression,
            "success": self.success,
            "error": self.error,
        }
        if isinstance(self.directive, CaptureDirective):
            data["variable"] = self.directive.variable
            data["capturedValue"] = None if self.captured_value is NOT_SET else self.captured_value
        if self.console_output is not None:
            data["consoleOutput"] = self.console_output
        return data


@dataclass
class StepResult:
    """Outcome of a single step.

    ``request`` is the resolved request when resolution succeeded, otherwise
    the step's original request.
    """

    step: FlowStep
    request: HttpRequest
    response: HttpResponse | None = None
    error: str | None = None
    directives: list[DirectiveResult] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None and all(d.success for d in self.directives)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.step.name,
            "request": {
                "method": self.request.method.value,
                "url": self.request.url,
                "headers": self.request.headers or {},
                "body": self.request.body,
            },
            "response": self.response.to_dict() if self.response else None,
            "error": self.error,
            "success": self.success,
            "directives": [d.to_dict() for d in self.directives],
            "duration_ms": round(self.duration_ms, 2),
        }


@dataclass
class FlowResult:
    """Outcome of a flow run.

    ``success`` is true only when no step errored and every directive
    succeeded. ``errors`` holds flow-level problems, such as parse errors.
    """

    flow: Flow
    steps: list[StepResult] = field(default_factory=list)
    success: bool = True
    duration_ms: float = 0.0
    context: ExecutionContext = field(default_factory=ExecutionContext)
    errors: list[str] = field(default_factory=list)

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def passed_steps(self) -> int:
        """Number of steps that got a response, regardless of directives."""
        return sum(1 for s in self.steps if s.error is None)

    @property
    def failed_steps(self) -> int:
        return sum(1 for s in self.steps if s.error is not None)

    @property
    def total_directives(self) -> int:
        return sum(len(s.directives) for s in self.steps)

    @property
    def passed_directives(self) -> int:
        return sum(1 for s in self.steps for d in s.directives if d.success)

    @property
    def failed_directives(self) -> int:
        return sum(1 for s in self.steps for d in s.directives if not d.success)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "flow_name": self.flow.name,
            "success": self.success,
            "duration_ms": round(self.duration_ms, 2),
            "summary": {
                "steps": {
                    "total": self.total_steps,
                    "passed": self.passed_steps,
                    "failed": self.failed_steps,
                },
                "directives": {
                    "total": self.total_directives,
                    "passed": self.passed_directives,
                    "failed": self.failed_directives,
                },
            },
            "steps": [s.to_dict() for s in self.steps],
            "context": self.context.to_dict(),
            "errors": list(self.errors),
        }
