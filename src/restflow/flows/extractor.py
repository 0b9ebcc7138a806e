"""Extraction of values from HTTP responses.

Paths understood by :class:`ValueExtractor`:

- ``status``, ``statusText``, ``responseTime``
- ``headers.<name>`` (exact name first, then case-insensitive)
- ``cookies.<name>`` (from ``Set-Cookie`` headers)
- ``body``, ``body.length`` and ``body.<jsonpath>``
- anything else is a JSONPath below the whole response object
"""

from __future__ import annotations

import json
from typing import Any

from jsonpath_ng import parse as parse_jsonpath

from restflow.core import NOT_SET
from restflow.flows.errors import ValueExtractionError
from restflow.flows.models import HttpResponse


def extract_jsonpath(data: Any, path: str) -> Any:
    """Run a JSONPath query and unwrap the matches.

    Args:
        data: The data to query.
        path: JSONPath expression (e.g. ``$.items[0].id``).

    Returns:
        ``NOT_SET`` for no match, the value for a single match, a list otherwise.

    Raises:
        Exception: Whatever the JSONPath parser raises for a malformed path.
    """
    matches = parse_jsonpath(path).find(data)

    if not matches:
        return NOT_SET
    elif len(matches) == 1:
        return matches[0].value
    return [m.value for m in matches]


def parse_body(body: Any) -> Any:
    """Return the body as JSON when it looks like an object or array."""
    if not body or not isinstance(body, str):
        return body

    trimmed = body.strip()
    if (trimmed.startswith("{") and trimmed.endswith("}")) or (
        trimmed.startswith("[") and trimmed.endswith("]")
    ):
        try:
            return json.loads(body)
        except ValueError:
            return body

    return body


def find_header(headers: dict[str, Any], name: str) -> Any:
    """Look up a header by exact name, then case-insensitively."""
    if name in headers:
        return headers[name]
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return NOT_SET


def _simple_path_extract(data: Any, path: str) -> Any:
    """Dot navigation used when a body path is not valid JSONPath."""
    current = data
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return NOT_SET
    return current


class ValueExtractor:
    """Extracts values referenced by a path from an :class:`HttpResponse`."""

    HEADERS_PREFIX = "headers."
    COOKIES_PREFIX = "cookies."
    BODY_PREFIX = "body."

    def extract(self, path: str, response: HttpResponse) -> Any:
        """Extract the value at ``path``.

        Returns:
            The value, or ``NOT_SET`` when nothing is found.

        Raises:
            ValueExtractionError: If a response-level JSONPath query is malformed.
        """
        if path == "status":
            return response.status
        if path == "statusText":
            return response.status_text
        if path == "responseTime":
            return response.response_time

        if path.startswith(self.HEADERS_PREFIX):
            return find_header(response.headers, path[len(self.HEADERS_PREFIX) :])

        if path.startswith(self.COOKIES_PREFIX):
            return self._extract_cookie(path[len(self.COOKIES_PREFIX) :], response.headers)

        if path == "body" or path.startswith(self.BODY_PREFIX):
            return self._extract_from_body(path, response.body)

        response_object = {
            "status": response.status,
            "statusText": response.status_text,
            "headers": dict(response.headers),
            "body": parse_body(response.body),
            "responseTime": response.response_time,
        }
        try:
            return extract_jsonpath(response_object, f"$.{path}")
        except Exception as e:
            raise ValueExtractionError(path, str(e))

    def _extract_from_body(self, path: str, body: str) -> Any:
        parsed_body = parse_body(body)

        if path == "body":
            return parsed_body

        if path == "body.length" and isinstance(parsed_body, str):
            return len(parsed_body)

        if not isinstance(parsed_body, (dict, list)):
            return NOT_SET

        body_path = path[len(self.BODY_PREFIX) :]
        try:
            return extract_jsonpath(parsed_body, f"$.{body_path}")
        except Exception:
            # No array or wildcard support here
            return _simple_path_extract(parsed_body, body_path)

    def _extract_cookie(self, name: str, headers: dict[str, Any]) -> Any:
        raw = find_header(headers, "set-cookie")
        if raw is NOT_SET or raw is None:
            return NOT_SET

        instances = raw if isinstance(raw, list) else str(raw).splitlines()
        for instance in instances:
            pair = instance.split(";", 1)[0]
            if "=" not in pair:
                continue
            cookie_name, cookie_value = pair.split("=", 1)
            if cookie_name.strip() == name:
                return cookie_value.strip()
        return NOT_SET


def extract_value(path: str, response: HttpResponse) -> Any:
    """Convenience function to extract a single value."""
    return ValueExtractor().extract(path, response)
