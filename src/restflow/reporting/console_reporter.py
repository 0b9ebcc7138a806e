"""Console reporter for human-readable output."""

from __future__ import annotations

import json

from restflow.core import stringify
from restflow.flows.models import CaptureDirective, ConsoleDirective, FlowResult, StepResult
from restflow.reporting.base import Reporter, parse_body_safely


class ConsoleReporter(Reporter):
    """Writes each step with its request, response and directive outcomes."""

    format_name = "pretty"

    def on_flow_start(self, flow_name: str) -> None:
        self.echo(f"\n{'=' * 60}")
        self.echo(f"Running flow: {flow_name}", bold=True)
        self.echo("=" * 60)

    def on_step_start(self, step_name: str, step_index: int, total_steps: int) -> None:
        self.echo(f"\n[{step_index + 1}/{total_steps}] {step_name}", bold=True)

    def on_step_complete(self, result: StepResult) -> None:
        self.echo(f"  {result.request.method.value} {result.request.url}", fg="cyan")

        if result.error:
            self.echo(f"  ERROR {result.error}", fg="red")
        elif result.response is not None:
            response = result.response
            color = "green" if response.status < 400 else "red"
            self.echo(f"  {response.status} {response.status_text} ({response.response_time:.0f}ms)", fg=color)

            if self.show_headers:
                for name, value in response.headers.items():
                    self.echo(f"    {name}: {stringify(value)}", dim=True)

            if self.show_body:
                if result.request.body:
                    self.echo("  Request body:", dim=True)
                    self._echo_body(result.request.body)
                if response.body:
                    self.echo("  Response body:", dim=True)
                    self._echo_body(response.body)

        for directive_result in result.directives:
            directive = directive_result.directive
            if isinstance(directive, CaptureDirective):
                label = f"capture {directive.variable} = {directive.expression}"
            else:
                label = f"{directive.type} {directive.expression}"

            if directive_result.success:
                self.echo(f"    PASS {label}", fg="green")
            else:
                self.echo(f"    FAIL {label}", fg="red")
                if directive_result.error:
                    self.echo(f"         {directive_result.error}", fg="red")

            if isinstance(directive, ConsoleDirective) and directive_result.console_output is not None:
                for line in directive_result.console_output.splitlines():
                    self.echo(f"         {line}", fg="yellow")

            if self.verbose and isinstance(directive, CaptureDirective) and directive_result.success:
                self.echo(f"         -> {stringify(directive_result.captured_value)}", dim=True)

    def on_flow_complete(self, result: FlowResult) -> None:
        for error in result.errors:
            self.echo(f"\n{error}", fg="red")

        self.echo("")
        if result.success:
            self.echo("Flow PASSED", fg="green", bold=True)
        else:
            self.echo("Flow FAILED", fg="red", bold=True)
        self.echo(
            f"  Steps: {result.passed_steps}/{result.total_steps} | "
            f"Directives: {result.passed_directives}/{result.total_directives} | "
            f"Duration: {result.duration_ms:.0f}ms"
        )

    def _echo_body(self, body: str) -> None:
        parsed = parse_body_safely(body)
        text = json.dumps(parsed, indent=2) if isinstance(parsed, (dict, list)) else str(parsed)
        for line in text.splitlines():
            self.echo(f"    {line}", dim=True)
