"""HTTP transport for executing flow requests with httpx."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from restflow.flows.errors import HttpError
from restflow.flows.models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30000


class HttpClient:
    """Executes :class:`HttpRequest` objects and returns :class:`HttpResponse` objects."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_MS,
        retries: int = 0,
        follow_redirects: bool = True,
        headers: dict[str, str] | None = None,
        verify_ssl: bool = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: Default request timeout in milliseconds.
            retries: Connection retries performed by the underlying transport.
            follow_redirects: Whether to follow redirects.
            headers: Default headers for all requests.
            verify_ssl: Whether to verify SSL certificates.
            transport: Custom httpx transport, mainly for tests.
        """
        self.timeout = timeout
        self.retries = retries
        self.follow_redirects = follow_redirects
        self.default_headers = headers or {}
        self.verify_ssl = verify_ssl
        self._transport = transport
        self._client: httpx.Client | None = None

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            transport = self._transport
            if transport is None:
                transport = httpx.HTTPTransport(retries=self.retries, verify=self.verify_ssl)
            self._client = httpx.Client(
                headers=self.default_headers,
                follow_redirects=self.follow_redirects,
                transport=transport,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def execute(self, request: HttpRequest) -> HttpResponse:
        """Send a request.

        Raises:
            HttpError: If no response could be obtained, whatever the cause.
        """
        timeout_ms = request.timeout or self.timeout
        start_time = time.perf_counter()

        logger.debug("%s %s", request.method.value, request.url)
        try:
            response = self.client.request(
                method=request.method.value,
                url=request.url,
                headers=request.headers,
                content=request.body.encode("utf-8") if request.body is not None else None,
                timeout=timeout_ms / 1000,
            )
            body = response.text
        except httpx.TimeoutException as e:
            raise HttpError(
                f"HTTP request failed: timed out after {timeout_ms:g}ms",
                request,
                self._elapsed_ms(start_time),
                e,
            )
        except Exception as e:
            # Connection failures, invalid URLs and header values httpx cannot encode
            raise HttpError(f"HTTP request failed: {e}", request, self._elapsed_ms(start_time), e)

        response_time = self._elapsed_ms(start_time)
        logger.debug("%s %s -> %d (%.0fms)", request.method.value, request.url, response.status_code, response_time)

        return HttpResponse(
            status=response.status_code,
            status_text=response.reason_phrase or "Unknown",
            headers=self._convert_headers(response.headers),
            body=body,
            response_time=response_time,
        )

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000

    @staticmethod
    def _convert_headers(headers: httpx.Headers) -> dict[str, Any]:
        """Flatten headers to strings, keeping repeated set-cookie headers apart."""
        converted: dict[str, Any] = {}
        for name in headers.keys():
            values = headers.get_list(name)
            if name == "set-cookie" and len(values) > 1:
                converted[name] = values
            else:
                converted[name] = ", ".join(values)
        return converted


def execute_request(request: HttpRequest, **options: Any) -> HttpResponse:
    """Convenience function to send a single request."""
    with HttpClient(**options) as client:
        return client.execute(request)
