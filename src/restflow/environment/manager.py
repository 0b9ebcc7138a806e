"""Environment manager combining loading, merging and validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from restflow.environment.errors import EnvironmentLoadError
from restflow.environment.loader import DotenvLoader
from restflow.environment.merger import EnvMerger
from restflow.environment.validator import EnvValidator, ValidationResult, ValidationRule

logger = logging.getLogger(__name__)


@dataclass
class Environment:
    """A named set of variables."""

    name: str
    variables: dict[str, str] = field(default_factory=dict)


class EnvironmentManager:
    """Loads environments from ``.env`` files."""

    def __init__(
        self,
        loader: DotenvLoader | None = None,
        merger: EnvMerger | None = None,
        validator: EnvValidator | None = None,
        include_process_env: bool = False,
    ) -> None:
        """Initialize the manager.

        Args:
            loader: Loader for environment files.
            merger: Merger for variable sources.
            validator: Validator used by :meth:`validate_environment`.
            include_process_env: Whether process environment variables are
                merged in below the file variables.
        """
        self.loader = loader or DotenvLoader()
        self.merger = merger or EnvMerger()
        self.validator = validator or EnvValidator()
        self.include_process_env = include_process_env

    def load_environment(self, path: str | Path | None = None) -> Environment:
        """Load an environment.

        Args:
            path: Path to a ``.env`` file; without one only process variables
                (if enabled) are used.

        Raises:
            EnvironmentLoadError: If the file cannot be loaded.
        """
        file_variables: dict[str, str] = {}

        if path:
            try:
                file_variables = self.loader.load(path)
            except EnvironmentLoadError:
                raise
            except Exception as e:
                raise EnvironmentLoadError(f"Failed to load environment from {path}: {e}", str(path))
            logger.debug("Loaded %d variable(s) from %s", len(file_variables), path)

        process_variables = dict(os.environ) if self.include_process_env else {}

        return Environment(
            name=self._environment_name(path) if path else "default",
            variables=self.merger.merge(process_variables, file_variables),
        )

    def validate_environment(self, environment: Environment, rules: list[ValidationRule]) -> ValidationResult:
        return self.validator.validate(environment.variables, rules)

    def merge_environments(self, *environments: Environment) -> Environment:
        """Merge environments in order, later ones winning."""
        return Environment(
            name="merged",
            variables=self.merger.merge(*(env.variables for env in environments)),
        )

    @staticmethod
    def _environment_name(path: str | Path) -> str:
        name = Path(path).name
        for suffix in (".env", ".environment"):
            if name.endswith(suffix) and name != suffix:
                return name[: -len(suffix)]
        return name


def load_environment_file(path: str | Path) -> Environment:
    """Convenience function to load a single environment file."""
    return EnvironmentManager().load_environment(path)
