"""Error classes for environment loading."""

from __future__ import annotations


class EnvironmentLoadError(Exception):
    """Raised when an environment file cannot be loaded."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)
