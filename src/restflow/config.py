"""Configuration for flow execution."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from restflow.transport.http import DEFAULT_TIMEOUT_MS


class ConfigLoadError(Exception):
    """Raised when a configuration file cannot be loaded."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{message} (in {path})" if path else message)


class RestflowConfig:
    """Execution settings shared by every flow in a run."""

    timeout: int
    retries: int
    base_url: str | None
    headers: dict[str, str]
    variables: dict[str, Any]
    follow_redirects: bool

    __slots__ = (
        "timeout",
        "retries",
        "base_url",
        "headers",
        "variables",
        "follow_redirects",
    )

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT_MS,
        retries: int = 0,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
        variables: dict[str, Any] | None = None,
        follow_redirects: bool = True,
    ) -> None:
        self.timeout = timeout
        self.retries = retries
        self.base_url = base_url
        self.headers = headers or {}
        self.variables = variables or {}
        self.follow_redirects = follow_redirects

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.__slots__)
        return f"RestflowConfig({fields})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RestflowConfig):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RestflowConfig:
        return cls(
            timeout=int(data.get("timeout", DEFAULT_TIMEOUT_MS)),
            retries=int(data.get("retries", 0)),
            base_url=data.get("base_url", data.get("baseUrl")),
            headers={str(k): str(v) for k, v in (data.get("headers") or {}).items()},
            variables=dict(data.get("variables") or {}),
            follow_redirects=bool(data.get("follow_redirects", True)),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> RestflowConfig:
        """Load configuration from a YAML file.

        Raises:
            ConfigLoadError: If the file is missing or not a YAML mapping.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigLoadError("Configuration file not found", str(path))

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Invalid YAML: {e}", str(path))

        if not isinstance(data, dict):
            raise ConfigLoadError("Configuration must be a mapping", str(path))

        try:
            return cls.from_dict(data)
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigLoadError(str(e), str(path))

    def merge(self, **overrides: Any) -> RestflowConfig:
        """Return a copy with every override that is not None applied.

        ``headers`` and ``variables`` overrides are merged into the existing
        mappings instead of replacing them.
        """
        values = {name: getattr(self, name) for name in self.__slots__}
        for name, value in overrides.items():
            if value is None:
                continue
            if name not in values:
                raise TypeError(f"Unknown configuration option: {name}")
            if name in ("headers", "variables"):
                value = {**values[name], **value}
            values[name] = value
        return RestflowConfig(**values)
