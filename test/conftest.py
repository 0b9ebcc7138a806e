from __future__ import annotations

import json
from typing import Any, Callable

import pytest

from restflow.flows.errors import HttpError
from restflow.flows.models import HttpRequest, HttpResponse


class StubTransport:
    """Returns canned responses keyed by ``(method, url)`` and records requests."""

    def __init__(self, routes: dict[tuple[str, str], HttpResponse | Exception] | None = None) -> None:
        self.routes = routes or {}
        self.requests: list[HttpRequest] = []
        self.closed = False

    def execute(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        outcome = self.routes.get((request.method.value, request.url))
        if outcome is None:
            raise HttpError(f"HTTP request failed: no route for {request.method.value} {request.url}", request)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True


def make_response(
    status: int = 200,
    body: Any = "",
    headers: dict[str, Any] | None = None,
    status_text: str = "OK",
    response_time: float = 12.5,
) -> HttpResponse:
    if not isinstance(body, str):
        body = json.dumps(body)
        headers = {"content-type": "application/json", **(headers or {})}
    return HttpResponse(
        status=status,
        status_text=status_text,
        headers=headers or {},
        body=body,
        response_time=response_time,
    )


@pytest.fixture
def response_factory() -> Callable[..., HttpResponse]:
    return make_response


@pytest.fixture
def stub_transport() -> StubTransport:
    return StubTransport()
