"""Summary reporter for concise results."""

from __future__ import annotations

from restflow.flows.models import FlowResult, StepResult
from restflow.reporting.base import Reporter


class SummaryReporter(Reporter):
    """Writes a single status line per flow plus the failures."""

    format_name = "summary"

    def on_flow_start(self, flow_name: str) -> None:
        if self.verbose:
            self.echo(f"Starting {flow_name}...")

    def on_step_start(self, step_name: str, step_index: int, total_steps: int) -> None:
        if self.verbose:
            self.echo(f"[{step_index + 1}/{total_steps}] {step_name}")

    def on_step_complete(self, result: StepResult) -> None:
        if self.verbose and result.error:
            self.echo(f"  x {result.step.name}: {result.error}", fg="red")

    def on_flow_complete(self, result: FlowResult) -> None:
        status = "PASS" if result.success else "FAIL"
        line = " | ".join(
            [
                status,
                f"{result.passed_steps}/{result.total_steps} steps",
                f"{result.passed_directives}/{result.total_directives} assertions",
                f"{result.duration_ms:.0f}ms",
            ]
        )
        self.echo(line, fg="green" if result.success else "red", bold=True)

        if result.success:
            return

        for error in result.errors:
            self.echo(f"  - {error}")

        failed_steps = [s for s in result.steps if s.error]
        if failed_steps:
            self.echo("\nFailed steps:")
            for step_result in failed_steps:
                self.echo(f"  - {step_result.step.name}: {step_result.error}")

        failed_directives = [(s.step.name, d) for s in result.steps for d in s.directives if not d.success]
        if failed_directives:
            self.echo("\nFailed assertions:")
            for step_name, directive_result in failed_directives:
                self.echo(f"  - {step_name}: {directive_result.directive.type} failed")
