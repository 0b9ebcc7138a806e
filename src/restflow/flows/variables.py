"""Variable resolver for ``{{name}}`` placeholders.

Handles:
- Context variables: ``{{token}}``
- Built-in dynamic values: ``{{uuid}}``, ``{{timestamp}}``, ``{{randomString}}``,
  ``{{randomNumber}}``
- Relative URLs, which are prefixed with the ``BASE_URL`` variable
"""

from __future__ import annotations

import random
import re
import string
import time
import uuid as uuid_module
from typing import Any, Callable

from restflow.core import stringify
from restflow.flows.errors import VariableError
from restflow.flows.models import ExecutionContext, HttpRequest

BASE_URL_VARIABLE = "BASE_URL"


def _generate_random_string(length: int = 8) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def _generate_random_number() -> int:
    return random.randint(0, 999_999)


BUILTIN_VARIABLES: dict[str, Callable[[], Any]] = {
    "uuid": lambda: str(uuid_module.uuid4()),
    "timestamp": lambda: int(time.time()),
    "randomString": _generate_random_string,
    "randomNumber": _generate_random_number,
}


class VariableResolver:
    """Resolves ``{{...}}`` placeholders against an execution context."""

    VARIABLE_PATTERN = re.compile(r"\{\{(\w+)\}\}")
    SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")

    def resolve(self, template: str, context: ExecutionContext) -> str:
        """Substitute every placeholder in ``template``.

        Built-ins are generated again for every occurrence, so
        ``"{{uuid}}-{{uuid}}"`` yields two different identifiers.

        Raises:
            VariableError: If a placeholder is neither a variable nor a built-in.
        """

        def replace_match(m: re.Match[str]) -> str:
            return stringify(self._resolve_variable(m.group(1), context))

        return self.VARIABLE_PATTERN.sub(replace_match, template)

    def _resolve_variable(self, name: str, context: ExecutionContext) -> Any:
        if name in context.variables:
            return context.variables[name]
        generator = BUILTIN_VARIABLES.get(name)
        if generator is not None:
            return generator()
        raise VariableError(name)

    def resolve_request(self, request: HttpRequest, context: ExecutionContext) -> HttpRequest:
        """Return a copy of ``request`` with placeholders substituted.

        The URL, header names, header values and body are resolved. A relative
        URL is prefixed with ``BASE_URL`` when that variable is defined.
        """
        url = self.resolve_url(self.resolve(request.url, context), context)

        headers = None
        if request.headers is not None:
            headers = {
                self.resolve(key, context): self.resolve(value, context)
                for key, value in request.headers.items()
            }

        body = request.body
        if body:
            body = self.resolve(body, context)

        return request.model_copy(update={"url": url, "headers": headers, "body": body})

    def resolve_url(self, url: str, context: ExecutionContext) -> str:
        """Prefix a relative URL with ``BASE_URL``; absolute URLs pass through."""
        if self.SCHEME_PATTERN.match(url) or BASE_URL_VARIABLE not in context.variables:
            return url

        base_url = stringify(context.variables[BASE_URL_VARIABLE])
        if base_url.endswith("/"):
            base_url = base_url[:-1]
        if url.startswith("/"):
            url = url[1:]
        return f"{base_url}/{url}"


def extract_variables(template: str) -> list[str]:
    """List placeholder names in order of first appearance."""
    names: list[str] = []
    for name in VariableResolver.VARIABLE_PATTERN.findall(template):
        if name not in names:
            names.append(name)
    return names


def has_variables(template: str) -> bool:
    """Check whether ``template`` contains any placeholder."""
    return VariableResolver.VARIABLE_PATTERN.search(template) is not None


def validate_variables(template: str, context: ExecutionContext) -> list[str]:
    """List placeholder names that the context does not define.

    Built-ins are not reported, since they always resolve.
    """
    return [
        name
        for name in extract_variables(template)
        if name not in context.variables and name not in BUILTIN_VARIABLES
    ]


def create_execution_context(
    environment_variables: dict[str, Any] | None = None,
    captured_variables: dict[str, Any] | None = None,
    cli_variables: dict[str, Any] | None = None,
) -> ExecutionContext:
    """Create a context from variable sources, lowest precedence first."""
    return ExecutionContext(
        variables={
            **(environment_variables or {}),
            **(captured_variables or {}),
            **(cli_variables or {}),
        },
        responses=[],
    )


def resolve_template(template: str, context: ExecutionContext) -> str:
    """Convenience function to resolve a single template."""
    return VariableResolver().resolve(template, context)
