"""Loading of ``.env`` files with python-dotenv."""

from __future__ import annotations

import io
from pathlib import Path

from dotenv import dotenv_values

from restflow.environment.errors import EnvironmentLoadError


class DotenvLoader:
    """Reads ``KEY=value`` files into dictionaries of strings."""

    def load(self, path: str | Path) -> dict[str, str]:
        """Load variables from a file.

        Raises:
            EnvironmentLoadError: If the file is missing or unreadable.
        """
        resolved_path = Path(path).resolve()

        if not resolved_path.is_file():
            raise EnvironmentLoadError(f"Environment file not found: {resolved_path}", str(resolved_path))

        try:
            values = dotenv_values(resolved_path, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise EnvironmentLoadError(f"Error loading environment file: {e}", str(resolved_path))

        return self._normalize(values)

    def load_from_string(self, content: str) -> dict[str, str]:
        """Parse variables from ``.env`` formatted text."""
        return self._normalize(dotenv_values(stream=io.StringIO(content)))

    @staticmethod
    def _normalize(values: dict[str, str | None]) -> dict[str, str]:
        # Bare keys without "=" come back as None
        return {key: value if value is not None else "" for key, value in values.items()}
