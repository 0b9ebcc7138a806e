"""Tests for restflow.environment.merger module."""
from __future__ import annotations

from restflow.environment.merger import EnvMerger, merge_environments


class TestEnvMerger:
    """Tests for EnvMerger."""

    def test_later_sources_win(self):
        assert EnvMerger().merge({"A": "1", "B": "1"}, {"B": "2"}, {"C": "3"}) == {"A": "1", "B": "2", "C": "3"}

    def test_no_sources(self):
        assert EnvMerger().merge() == {}

    def test_merge_with_precedence(self):
        base = {"A": "1"}

        assert EnvMerger().merge_with_precedence(base, {"A": "2"}) == {"A": "2"}
        assert base == {"A": "1"}


class TestMergeEnvironments:
    """Tests for merge_environments function."""

    def test_cli_over_file_over_process(self):
        merged = merge_environments(
            process_env={"A": "process", "B": "process", "C": "process"},
            file_env={"B": "file", "C": "file"},
            cli_overrides={"C": "cli"},
        )

        assert merged == {"A": "process", "B": "file", "C": "cli"}

    def test_missing_sources(self):
        assert merge_environments(file_env={"A": "1"}) == {"A": "1"}
