"""Flow executor for running parsed flows.

Executes steps strictly in order: each step's request is resolved against
the current variables, sent, and its directives are evaluated. Captured
values become visible to the following directives and steps.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Protocol

from restflow.config import RestflowConfig
from restflow.core import NOT_SET, stringify
from restflow.environment import EnvironmentLoadError, EnvironmentManager
from restflow.flows.errors import FlowError, FlowExecutionError
from restflow.flows.evaluator import AssertionEvaluator, is_variable_reference
from restflow.flows.extractor import ValueExtractor
from restflow.flows.models import (
    AssertDirective,
    CaptureDirective,
    ConsoleDirective,
    DirectiveResult,
    ExecutionContext,
    Flow,
    FlowResult,
    FlowStep,
    HttpRequest,
    HttpResponse,
    StepResult,
)
from restflow.flows.parser import FlowParser
from restflow.flows.variables import BASE_URL_VARIABLE, VariableResolver, create_execution_context
from restflow.transport.http import HttpClient

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def execute(self, request: HttpRequest) -> HttpResponse: ...


class FlowExecutor:
    """Executes flows against an HTTP transport."""

    def __init__(
        self,
        config: RestflowConfig | None = None,
        http_client: Transport | None = None,
        variable_resolver: VariableResolver | None = None,
        assertion_evaluator: AssertionEvaluator | None = None,
        value_extractor: ValueExtractor | None = None,
        environment_manager: EnvironmentManager | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            config: Execution settings; CLI variables come from ``config.variables``.
            http_client: Transport used for requests. When omitted an
                :class:`HttpClient` is created and closed after each flow.
            variable_resolver: Resolver for request placeholders.
            assertion_evaluator: Evaluator for assert directives.
            value_extractor: Extractor for capture and console directives.
            environment_manager: Loader for environment files.
        """
        self.config = config or RestflowConfig()
        self.variable_resolver = variable_resolver or VariableResolver()
        self.value_extractor = value_extractor or ValueExtractor()
        self.assertion_evaluator = assertion_evaluator or AssertionEvaluator(extractor=self.value_extractor)
        self.environment_manager = environment_manager or EnvironmentManager()
        self._owns_client = http_client is None
        self.http_client: Transport = http_client or self._create_client()

    def _create_client(self) -> HttpClient:
        return HttpClient(
            timeout=self.config.timeout,
            retries=self.config.retries,
            follow_redirects=self.config.follow_redirects,
            headers=self.config.headers,
        )

    def execute_flow(
        self,
        content: str,
        environment_path: str | Path | None = None,
        name: str | None = None,
        on_step_complete: Callable[[StepResult], None] | None = None,
    ) -> FlowResult:
        """Parse and execute flow text.

        Never raises: parse errors and fatal execution errors are logged and
        reported on a failed result.
        """
        start_time = time.perf_counter()

        parse_result = FlowParser().parse_string(content, name=name)
        if parse_result.errors:
            for error in parse_result.errors:
                logger.error("%s", error)
            return FlowResult(
                flow=parse_result.flow,
                success=False,
                duration_ms=self._elapsed_ms(start_time),
                errors=[f"Flow parsing failed: {', '.join(parse_result.errors)}"],
            )

        try:
            return self.execute_flow_object(parse_result.flow, environment_path, on_step_complete)
        except FlowExecutionError as e:
            logger.error("Flow execution error: %s", e)
            result = e.flow_result or FlowResult(flow=parse_result.flow, success=False)
            result.errors.append(str(e))
            return result

    def execute_flow_object(
        self,
        flow: Flow,
        environment_path: str | Path | None = None,
        on_step_complete: Callable[[StepResult], None] | None = None,
    ) -> FlowResult:
        """Execute a parsed flow.

        Args:
            flow: The flow to execute.
            environment_path: Optional ``.env`` file with the lowest-precedence variables.
            on_step_complete: Callback called after each step completes.

        Returns:
            FlowResult with every step that was attempted.

        Raises:
            FlowExecutionError: If orchestration fails outside step-level
                handling; the partial result is attached.
        """
        start_time = time.perf_counter()
        context = self._initialize_context(environment_path)
        result = FlowResult(flow=flow, context=context)

        try:
            for step in flow.steps:
                step_result = self._execute_step(step, context)
                result.steps.append(step_result)

                if step_result.response is not None:
                    context.responses.append(step_result.response)

                if not step_result.success:
                    result.success = False

                if on_step_complete:
                    on_step_complete(step_result)
        except Exception as e:
            result.success = False
            result.duration_ms = self._elapsed_ms(start_time)
            raise FlowExecutionError(f"Flow execution failed: {e}", result, e) from e
        finally:
            if self._owns_client:
                self.http_client.close()  # type: ignore[attr-defined]

        result.duration_ms = self._elapsed_ms(start_time)
        return result

    def _initialize_context(self, environment_path: str | Path | None) -> ExecutionContext:
        """Build the context: environment < captured < CLI variables."""
        environment_variables: dict[str, Any] = {}

        if self.config.base_url:
            environment_variables[BASE_URL_VARIABLE] = self.config.base_url

        if environment_path:
            try:
                environment = self.environment_manager.load_environment(environment_path)
                environment_variables.update(environment.variables)
            except EnvironmentLoadError as e:
                logger.warning("Failed to load environment: %s", e)

        return create_execution_context(environment_variables, {}, self.config.variables)

    def _execute_step(self, step: FlowStep, context: ExecutionContext) -> StepResult:
        """Execute a single step."""
        start_time = time.perf_counter()
        request = step.request

        try:
            request = self.variable_resolver.resolve_request(step.request, context)
            response = self.http_client.execute(request)
        except Exception as e:
            logger.info("Step '%s' failed: %s", step.name, e)
            return StepResult(
                step=step,
                request=request,
                error=str(e),
                directives=[
                    DirectiveResult(directive=directive, success=False, error=f"Step execution failed: {e}")
                    for directive in step.directives
                ],
                duration_ms=self._elapsed_ms(start_time),
            )

        directive_results = self._evaluate_directives(step, response, context)
        duration_ms = self._elapsed_ms(start_time)
        logger.debug("Step '%s' completed in %.0fms", step.name, duration_ms)

        return StepResult(
            step=step,
            request=request,
            response=response,
            directives=directive_results,
            duration_ms=duration_ms,
        )

    def _evaluate_directives(
        self,
        step: FlowStep,
        response: HttpResponse,
        context: ExecutionContext,
    ) -> list[DirectiveResult]:
        results: list[DirectiveResult] = []

        for directive in step.directives:
            if isinstance(directive, CaptureDirective):
                result = self._evaluate_capture(directive, response)
                # Visible to the directives after this one
                if result.success and result.captured_value is not NOT_SET:
                    context.variables[directive.variable] = result.captured_value
            elif isinstance(directive, AssertDirective):
                result = self._evaluate_assert(directive, response, context)
            elif isinstance(directive, ConsoleDirective):
                result = self._evaluate_console(directive, response, context)
            else:
                result = DirectiveResult(
                    directive=directive,
                    success=False,
                    error=f"Unknown directive type: {getattr(directive, 'type', type(directive).__name__)}",
                )
            results.append(result)

        return results

    def _evaluate_capture(self, directive: CaptureDirective, response: HttpResponse) -> DirectiveResult:
        try:
            value = self.value_extractor.extract(directive.expression, response)
        except FlowError as e:
            return DirectiveResult(directive=directive, success=False, error=f"Failed to capture value: {e}")
        return DirectiveResult(directive=directive, success=True, captured_value=value)

    def _evaluate_assert(
        self,
        directive: AssertDirective,
        response: HttpResponse,
        context: ExecutionContext,
    ) -> DirectiveResult:
        result = self.assertion_evaluator.evaluate(directive.expression, response, context.variables)
        return DirectiveResult(
            directive=directive,
            success=result.passed,
            error=None if result.passed else result.message,
        )

    def _evaluate_console(
        self,
        directive: ConsoleDirective,
        response: HttpResponse,
        context: ExecutionContext,
    ) -> DirectiveResult:
        try:
            if is_variable_reference(directive.expression, context.variables):
                value = context.variables[directive.expression]
            else:
                value = self.value_extractor.extract(directive.expression, response)
        except FlowError as e:
            return DirectiveResult(directive=directive, success=False, error=f"Failed to console log value: {e}")
        return DirectiveResult(directive=directive, success=True, console_output=format_console_value(value))

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000


def format_console_value(value: Any) -> str:
    """Render a value for console directive output."""
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, (dict, list)):
        return json.dumps(value, indent=2, default=str)
    return stringify(value)


def execute_flow_from_string(content: str, config: RestflowConfig | None = None) -> FlowResult:
    """Convenience function to execute flow text."""
    return FlowExecutor(config=config).execute_flow(content)


def execute_flow_with_environment(
    content: str,
    environment_path: str | Path,
    config: RestflowConfig | None = None,
) -> FlowResult:
    """Convenience function to execute flow text with an environment file."""
    return FlowExecutor(config=config).execute_flow(content, environment_path)
