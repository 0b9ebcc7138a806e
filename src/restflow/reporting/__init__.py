"""Reporters rendering flow results as text, JSON or a one-line summary."""

from __future__ import annotations

from typing import Any

from restflow.reporting.base import Reporter
from restflow.reporting.console_reporter import ConsoleReporter
from restflow.reporting.json_reporter import JSONReporter
from restflow.reporting.summary_reporter import SummaryReporter

REPORTERS: dict[str, type[Reporter]] = {
    "pretty": ConsoleReporter,
    "json": JSONReporter,
    "summary": SummaryReporter,
}


def create_reporter(format: str = "pretty", **options: Any) -> Reporter:
    """Create a reporter for an output format.

    Raises:
        ValueError: If the format is unknown.
    """
    try:
        reporter_cls = REPORTERS[format]
    except KeyError:
        raise ValueError(f"Unknown output format: {format} (expected one of: {', '.join(REPORTERS)})")
    return reporter_cls(**options)


__all__ = [
    "REPORTERS",
    "ConsoleReporter",
    "JSONReporter",
    "Reporter",
    "SummaryReporter",
    "create_reporter",
]
