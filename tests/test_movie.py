"""
Unit tests for the Movie record, its wire form and validation rules.
"""

import json
from datetime import date, datetime, timezone

import pytest

from cinedb.core.models.movie import InvalidRuntimeFormat, Movie, Runtime, validate_movie
from cinedb.core.validator import Validator


def casablanca(**overrides) -> Movie:
    fields = dict(title="Casablanca", year=1942, runtime=Runtime(102), genres=["drama", "romance", "war"])
    fields.update(overrides)
    return Movie(**fields)


class TestRuntime:
    def test_wire_form(self):
        assert Runtime(102).to_wire() == "102 mins"

    def test_json_text_is_quoted(self):
        text = json.dumps({"runtime": Runtime(102).to_wire()})
        assert text == '{"runtime": "102 mins"}'

    def test_parse_wire_form(self):
        r = Runtime.parse("102 mins")
        assert r == 102
        assert isinstance(r, Runtime)

    def test_parse_integer(self):
        assert Runtime.parse(95) == 95

    @pytest.mark.parametrize("bad", [
        "102", "102 minutes", "mins", " 102 mins", "-5 mins", 1.5, True, None,
        "102 mins\n", "\u0661\u0660\u0662 mins",
    ])
    def test_parse_rejects(self, bad):
        with pytest.raises(InvalidRuntimeFormat, match="invalid runtime format"):
            Runtime.parse(bad)


class TestWireEncoding:
    def test_full_movie(self):
        m = casablanca(id=7, version=3, created_at=datetime.now(timezone.utc))
        assert m.to_wire() == {
            "id": 7,
            "title": "Casablanca",
            "year": 1942,
            "runtime": "102 mins",
            "genres": ["drama", "romance", "war"],
            "version": 3,
        }

    def test_created_at_never_encoded(self):
        m = casablanca(created_at=datetime.now(timezone.utc))
        assert "created_at" not in m.to_wire()

    def test_zero_values_omitted(self):
        wire = Movie().to_wire()
        assert wire == {"id": 0, "title": "", "version": 0}

    def test_empty_genres_omitted(self):
        assert "genres" not in casablanca(genres=[]).to_wire()

    def test_decode_restores_integer_runtime(self):
        wire = json.loads(json.dumps(casablanca(id=1, version=1).to_wire()))
        assert wire["runtime"] == "102 mins"
        decoded = Movie.from_wire(wire)
        assert decoded.runtime == 102
        assert decoded.title == "Casablanca"


class TestValidateMovie:
    def test_valid_movie(self):
        v = Validator()
        validate_movie(v, casablanca())
        assert v.valid()

    def test_reports_every_broken_field(self):
        v = Validator()
        validate_movie(v, Movie(title="", year=0, runtime=Runtime(102), genres=[]))
        assert v.errors == {
            "title": "must be provided",
            "year": "must be provided",
            "genres": "must contain at least 1 genre",
        }

    def test_title_length_counts_bytes(self):
        v = Validator()
        # 250 two-byte characters = 500 bytes, exactly on the limit
        validate_movie(v, casablanca(title="é" * 250))
        assert v.valid()

        v = Validator()
        validate_movie(v, casablanca(title="é" * 251))
        assert v.errors["title"] == "must not be more than 500 bytes long"

    @pytest.mark.parametrize("year,message", [
        (1887, "must be greater than 1888"),
        (date.today().year + 1, "must not be in the future"),
    ])
    def test_year_bounds(self, year, message):
        v = Validator()
        validate_movie(v, casablanca(year=year))
        assert v.errors == {"year": message}

    def test_year_edges_accepted(self):
        for year in (1888, date.today().year):
            v = Validator()
            validate_movie(v, casablanca(year=year))
            assert v.valid()

    def test_runtime_missing_and_negative(self):
        v = Validator()
        validate_movie(v, casablanca(runtime=Runtime(0)))
        assert v.errors == {"runtime": "must be provided"}

        v = Validator()
        validate_movie(v, casablanca(runtime=Runtime(-1)))
        assert v.errors == {"runtime": "must be a positive integer"}

    def test_genres_rules(self):
        cases = [
            (None, "must be provided"),
            ([], "must contain at least 1 genre"),
            (["a", "b", "c", "d", "e", "f"], "must not contain more than 5 genres"),
            (["drama", "drama"], "must not contain duplicate values"),
        ]
        for genres, message in cases:
            v = Validator()
            validate_movie(v, casablanca(genres=genres))
            assert v.errors == {"genres": message}


class TestRuntimeRange:
    """Runtime must fit the 32-bit INTEGER column."""

    def test_largest_value_accepted(self):
        assert Runtime.parse(2 ** 31 - 1) == 2 ** 31 - 1
        assert Runtime.parse(f"{2 ** 31 - 1} mins") == 2 ** 31 - 1

    @pytest.mark.parametrize("bad", [2 ** 31, 3_000_000_000, "3000000000 mins", -(2 ** 31) - 1])
    def test_out_of_range_rejected(self, bad):
        with pytest.raises(InvalidRuntimeFormat):
            Runtime.parse(bad)
