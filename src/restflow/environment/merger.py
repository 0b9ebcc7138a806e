"""Merging of environment variable sources."""

from __future__ import annotations


class EnvMerger:
    """Merges flat variable dictionaries; later sources win on collisions."""

    def merge(self, *sources: dict[str, str]) -> dict[str, str]:
        """Merge any number of sources in order.

        Args:
            sources: Variable dictionaries, lowest precedence first.

        Returns:
            A new dictionary.
        """
        result: dict[str, str] = {}
        for source in sources:
            result.update(source)
        return result

    def merge_with_precedence(self, base: dict[str, str], overrides: dict[str, str]) -> dict[str, str]:
        return {**base, **overrides}


def merge_environments(
    process_env: dict[str, str] | None = None,
    file_env: dict[str, str] | None = None,
    cli_overrides: dict[str, str] | None = None,
) -> dict[str, str]:
    """Merge process, file and CLI variables, CLI taking precedence."""
    return EnvMerger().merge(process_env or {}, file_env or {}, cli_overrides or {})
