"""JSON reporter for machine-readable output."""

from __future__ import annotations

import json
import time
from typing import Any

from restflow.flows.models import FlowResult, StepResult
from restflow.reporting.base import Reporter, parse_body_safely


class JSONReporter(Reporter):
    """Writes one JSON document per flow, or JSON events in verbose mode."""

    format_name = "json"

    def __init__(self, **options: Any) -> None:
        super().__init__(**options)
        self._flow_data: dict[str, Any] | None = None

    def on_flow_start(self, flow_name: str) -> None:
        self._flow_data = {
            "flowName": flow_name,
            "startTime": int(time.time() * 1000),
            "steps": [],
        }
        if self.verbose:
            self._output_event("flow_started", {"flowName": flow_name})

    def on_step_start(self, step_name: str, step_index: int, total_steps: int) -> None:
        if self.verbose:
            self._output_event(
                "step_started",
                {"stepName": step_name, "stepIndex": step_index, "totalSteps": total_steps},
            )

    def on_step_complete(self, result: StepResult) -> None:
        if self._flow_data is None:
            return

        step_data: dict[str, Any] = {
            "name": result.step.name,
            "method": result.request.method.value,
            "url": result.request.url,
            "status": result.response.status if result.response else None,
            "duration": round(result.duration_ms, 2),
            "success": result.success,
            "error": result.error,
            "directives": [
                {
                    "type": d.directive.type,
                    "expression": d.directive.expression,
                    "success": d.success,
                    "error": d.error,
                }
                for d in result.directives
            ],
        }

        if self.show_headers and result.response is not None:
            step_data["headers"] = dict(result.response.headers)
        if self.show_body and result.response is not None and result.response.body:
            step_data["responseBody"] = parse_body_safely(result.response.body)
        if self.show_body and result.request.body:
            step_data["requestBody"] = parse_body_safely(result.request.body)

        self._flow_data["steps"].append(step_data)

        if self.verbose:
            self._output_event("step_completed", step_data)

    def on_flow_complete(self, result: FlowResult) -> None:
        output = {
            **(self._flow_data or {"flowName": result.flow.name, "steps": []}),
            "endTime": int(time.time() * 1000),
            "success": result.success,
            "duration": round(result.duration_ms, 2),
            "summary": {
                "steps": {
                    "total": result.total_steps,
                    "passed": result.passed_steps,
                    "failed": result.failed_steps,
                },
                "directives": {
                    "total": result.total_directives,
                    "passed": result.passed_directives,
                    "failed": result.failed_directives,
                },
            },
        }
        if result.errors:
            output["errors"] = list(result.errors)

        if self.verbose:
            self._output_event("flow_completed", output)
        else:
            self.echo(json.dumps(output, indent=2, default=str))

    def _output_event(self, event_type: str, data: Any) -> None:
        self.echo(
            json.dumps(
                {"event": event_type, "timestamp": int(time.time() * 1000), "data": data},
                default=str,
            )
        )
