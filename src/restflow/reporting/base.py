"""Base reporter interface for flow results."""

from __future__ import annotations

import json
from typing import IO, Any

import click

from restflow.flows.models import FlowResult, StepResult


class Reporter:
    """Receives flow events and renders them to a stream."""

    format_name = ""

    def __init__(
        self,
        verbose: bool = False,
        show_headers: bool = False,
        show_body: bool = False,
        colors: bool = True,
        file: IO[str] | None = None,
    ) -> None:
        """Initialize the reporter.

        Args:
            verbose: Emit progress while steps run.
            show_headers: Include response headers.
            show_body: Include request and response bodies.
            colors: Whether to style the output.
            file: Output stream, stdout by default.
        """
        self.verbose = verbose
        self.show_headers = show_headers
        self.show_body = show_body
        self.colors = colors
        self.file = file

    def on_flow_start(self, flow_name: str) -> None:
        pass

    def on_step_start(self, step_name: str, step_index: int, total_steps: int) -> None:
        pass

    def on_step_complete(self, result: StepResult) -> None:
        pass

    def on_flow_complete(self, result: FlowResult) -> None:
        pass

    def report(self, result: FlowResult) -> None:
        """Replay a finished flow through the event methods."""
        self.on_flow_start(result.flow.name or "flow")
        total = len(result.steps)
        for index, step_result in enumerate(result.steps):
            self.on_step_start(step_result.step.name, index, total)
            self.on_step_complete(step_result)
        self.on_flow_complete(result)

    def echo(self, message: str = "", **styles: Any) -> None:
        if self.colors and styles:
            message = click.style(message, **styles)
        click.echo(message, file=self.file, color=None if self.colors else False)


def parse_body_safely(body: str | None) -> Any:
    if body is None:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return body
