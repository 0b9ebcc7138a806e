"""Tests for restflow.core value helpers."""
from __future__ import annotations

import math

import pytest

from restflow.core import NOT_SET, is_number, strict_equals, stringify, to_number


class TestNotSet:
    """Tests for the NOT_SET marker."""

    def test_is_falsy(self):
        assert not NOT_SET

    def test_is_distinct_from_none(self):
        assert NOT_SET is not None
        assert repr(NOT_SET) == "<NOT_SET>"


class TestStringify:
    """Tests for stringify function."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (NOT_SET, "undefined"),
            (None, "null"),
            (True, "true"),
            (False, "false"),
            (42, "42"),
            (42.0, "42"),
            (1.5, "1.5"),
            (math.nan, "NaN"),
            (math.inf, "Infinity"),
            ("text", "text"),
            ({"a": 1}, '{"a":1}'),
            ([1, "x"], '[1,"x"]'),
        ],
    )
    def test_values(self, value, expected):
        assert stringify(value) == expected


class TestToNumber:
    """Tests for to_number function."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, 0.0),
            (True, 1.0),
            (False, 0.0),
            (7, 7.0),
            (" 3.5 ", 3.5),
            ("", 0.0),
            ([], 0.0),
            (["12"], 12.0),
        ],
    )
    def test_numeric_readings(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", [NOT_SET, "abc", {"a": 1}, [1, 2]])
    def test_non_numeric_is_nan(self, value):
        assert math.isnan(to_number(value))


class TestStrictEquals:
    """Tests for strict_equals function."""

    def test_numbers_compare_by_value(self):
        assert strict_equals(1, 1.0)

    def test_no_string_number_coercion(self):
        assert not strict_equals("200", 200)

    def test_no_bool_number_coercion(self):
        assert not strict_equals(True, 1)
        assert strict_equals(False, False)

    def test_none_and_not_set_are_different(self):
        assert strict_equals(None, None)
        assert not strict_equals(NOT_SET, None)
        assert strict_equals(NOT_SET, NOT_SET)

    def test_containers_compare_structurally(self):
        assert strict_equals({"a": [1]}, {"a": [1]})
        assert not strict_equals([1], (1,))


class TestIsNumber:
    """Tests for is_number function."""

    def test_excludes_bool(self):
        assert is_number(1)
        assert is_number(1.5)
        assert not is_number(True)
        assert not is_number("1")
