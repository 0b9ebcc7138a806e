from __future__ import annotations

from restflow.transport.http import DEFAULT_TIMEOUT_MS, HttpClient, execute_request

__all__ = ["DEFAULT_TIMEOUT_MS", "HttpClient", "execute_request"]
