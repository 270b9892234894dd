"""
Unit tests for the Validator accumulator.
"""

import pytest

from cinedb.core.validator import Validator, unique


class TestValidator:
    """Tests for Validator."""

    def test_new_validator_is_valid(self):
        assert Validator().valid()

    def test_failed_check_records_message(self):
        v = Validator()
        v.check(False, "title", "must be provided")
        assert not v.valid()
        assert v.errors == {"title": "must be provided"}

    def test_passing_check_records_nothing(self):
        v = Validator()
        v.check(True, "title", "must be provided")
        assert v.valid()

    def test_first_message_per_field_wins(self):
        v = Validator()
        v.check(False, "year", "must be provided")
        v.check(False, "year", "must be greater than 1888")
        v.add_error("year", "must not be in the future")
        assert v.errors["year"] == "must be provided"

    def test_errors_are_read_only(self):
        v = Validator()
        v.add_error("genres", "must be provided")
        with pytest.raises(TypeError):
            v.errors["genres"] = "x"  # type: ignore[index]
        assert v.errors["genres"] == "must be provided"


class TestUnique:
    def test_distinct(self):
        assert unique(["drama", "romance", "war"])

    def test_duplicates(self):
        assert not unique(["drama", "war", "drama"])

    def test_case_sensitive(self):
        assert unique(["Drama", "drama"])

    def test_empty(self):
        assert unique([])
