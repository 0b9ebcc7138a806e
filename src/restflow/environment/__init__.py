"""Environment files: loading, merging and validation of variables."""

from __future__ import annotations

from restflow.environment.errors import EnvironmentLoadError
from restflow.environment.loader import DotenvLoader
from restflow.environment.manager import Environment, EnvironmentManager, load_environment_file
from restflow.environment.merger import EnvMerger, merge_environments
from restflow.environment.validator import (
    COMMON_RULES,
    EnvValidator,
    ValidationIssue,
    ValidationResult,
    ValidationRule,
)

__all__ = [
    "COMMON_RULES",
    "DotenvLoader",
    "EnvMerger",
    "EnvValidator",
    "Environment",
    "EnvironmentLoadError",
    "EnvironmentManager",
    "ValidationIssue",
    "ValidationResult",
    "ValidationRule",
    "load_environment_file",
    "merge_environments",
]
