"""Flow parser for ``.flow`` files.

A flow file is a sequence of steps separated by ``###`` lines::

    ### Login
    POST {{BASE_URL}}/login
    Content-Type: application/json

    {"username": "admin", "password": "{{PASSWORD}}"}

    > assert status == 200
    > capture token = body.token

Parsing never raises: a section that fails to parse is reported in
:attr:`ParseResult.errors` and left out of the flow.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from restflow.flows.errors import FlowParseError
from restflow.flows.models import (
    AssertDirective,
    CaptureDirective,
    ConsoleDirective,
    Flow,
    FlowStep,
    HttpMethod,
    HttpRequest,
)

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """A parsed flow and the errors of the sections that were skipped."""

    flow: Flow
    errors: list[str] = field(default_factory=list)


class FlowParser:
    """Parses flow text into :class:`Flow` objects."""

    STEP_DELIMITER = re.compile(r"^###[ \t]*", re.MULTILINE)
    CAPTURE_PATTERN = re.compile(r"^capture\s+(\w+)\s*=\s*(.+)$")
    HEADER_PATTERN = re.compile(r"^[A-Za-z0-9!#$%&'*+.^_`|~-]+\s*:")
    DIRECTIVE_PREFIX = ">"

    def parse_string(self, content: str, name: str | None = None) -> ParseResult:
        """Parse flow content from a string.

        Args:
            content: Flow file text.
            name: Optional flow name.

        Returns:
            ParseResult with the steps that parsed and one error per failed section.
        """
        errors: list[str] = []
        steps: list[FlowStep] = []

        sections = [s for s in self.STEP_DELIMITER.split(content) if not self._is_blank(s)]

        for section in sections:
            try:
                steps.append(self._parse_step(section))
            except FlowParseError as e:
                errors.append(f"Error parsing step: {e}")

        return ParseResult(flow=Flow(name=name, steps=steps), errors=errors)

    def parse_file(self, path: str | Path) -> ParseResult:
        """Parse a flow file; the flow is named after the file."""
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            return ParseResult(flow=Flow(name=path.stem), errors=[f"Failed to read file {path}: {e}"])
        return self.parse_string(content, name=path.stem)

    def _parse_step(self, section: str) -> FlowStep:
        lines = self._clean_lines(section)

        if not lines:
            raise FlowParseError("Empty step section")

        name = lines[0]
        request, next_index = self._parse_request(lines, 1)
        directives = self._parse_directives(lines[next_index:])

        return FlowStep(name=name, request=request, directives=directives)

    @staticmethod
    def _is_blank(section: str) -> bool:
        """A section holding only whitespace and comments, e.g. a file preamble."""
        return all(not line.strip() or line.strip().startswith("#") for line in section.split("\n"))

    def _clean_lines(self, section: str) -> list[str]:
        """Trim lines and drop comments, keeping JSON body lines verbatim."""
        lines: list[str] = []
        body_started = False

        for raw_line in section.split("\n"):
            stripped = raw_line.strip()
            if stripped.startswith(("{", "[")):
                body_started = True
            elif body_started and stripped.startswith(self.DIRECTIVE_PREFIX):
                body_started = False

            if not stripped or stripped.startswith("#"):
                continue
            lines.append(raw_line.rstrip("\r") if body_started else stripped)

        return lines

    def _parse_request(self, lines: list[str], start_index: int) -> tuple[HttpRequest, int]:
        if start_index >= len(lines):
            raise FlowParseError("No HTTP request found")

        request_line = lines[start_index]
        parts = request_line.split()
        if len(parts) < 2:
            raise FlowParseError(f"Invalid request line: {request_line}")

        # Anything after the URL, such as an HTTP version, is ignored
        method_str = parts[0].upper()
        url = parts[1]
        if not HttpMethod.is_valid(method_str):
            raise FlowParseError(f"Invalid HTTP method: {method_str}")

        index = start_index + 1
        headers: dict[str, str] = {}

        while index < len(lines):
            line = lines[index].lstrip()
            if not line.startswith(("{", "[", self.DIRECTIVE_PREFIX)) and self.HEADER_PATTERN.match(line):
                key, value = line.split(":", 1)
                headers[key.strip()] = value.strip()
                index += 1
            else:
                break

        body_lines: list[str] = []
        while index < len(lines) and not lines[index].lstrip().startswith(self.DIRECTIVE_PREFIX):
            body_lines.append(lines[index])
            index += 1

        body = "\n".join(body_lines)

        request = HttpRequest(
            method=HttpMethod(method_str),
            url=url,
            headers=headers or None,
            body=body or None,
        )
        return request, index

    def _parse_directives(self, lines: list[str]) -> list[CaptureDirective | AssertDirective | ConsoleDirective]:
        directives: list[CaptureDirective | AssertDirective | ConsoleDirective] = []

        for line in lines:
            line = line.strip()
            if not line.startswith(self.DIRECTIVE_PREFIX):
                continue

            content = line[len(self.DIRECTIVE_PREFIX) :].strip()

            if content.startswith("capture "):
                match = self.CAPTURE_PATTERN.match(content)
                if match:
                    directives.append(CaptureDirective(variable=match.group(1), expression=match.group(2).strip()))
            elif content.startswith("assert "):
                directives.append(AssertDirective(expression=content[len("assert ") :].strip()))
            elif content.startswith("console "):
                directives.append(ConsoleDirective(expression=content[len("console ") :].strip()))
            else:
                logger.debug("Skipping unrecognized directive: %s", line)

        return directives


def parse_flow(content: str, name: str | None = None) -> ParseResult:
    """Convenience function to parse flow content from a string."""
    return FlowParser().parse_string(content, name=name)


def parse_flow_file(path: str | Path) -> ParseResult:
    """Convenience function to parse a flow file."""
    return FlowParser().parse_file(path)
