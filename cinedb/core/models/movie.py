# cinedb/core/models/movie.py
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from cinedb.core.validator import Validator, unique

_RUNTIME_RE = re.compile(r"([0-9]+) mins")

# movies.runtime and movies.year are INTEGER columns
INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


class InvalidRuntimeFormat(ValueError):
    def __init__(self) -> None:
        super().__init__("invalid runtime format")


class Runtime(int):
    """Movie length in minutes. On the wire it is the string "<n> mins"."""

    def to_wire(self) -> str:
        return f"{int(self)} mins"

    @classmethod
    def parse(cls, value: Any) -> "Runtime":
        # bool is an int subclass; JSON true/false is never a runtime
        if isinstance(value, bool):
            raise InvalidRuntimeFormat()
        if isinstance(value, int):
            minutes = value
        elif isinstance(value, str) and (m := _RUNTIME_RE.fullmatch(value)):
            minutes = int(m.group(1))
        else:
            raise InvalidRuntimeFormat()
        if not INT32_MIN <= minutes <= INT32_MAX:
            raise InvalidRuntimeFormat()
        return cls(minutes)


@dataclass
class Movie:
    id: int = 0
    created_at: Optional[datetime] = None
    title: str = ""
    year: int = 0
    runtime: Runtime = Runtime(0)
    genres: Optional[List[str]] = None
    version: int = 0

    def to_wire(self) -> Dict[str, Any]:
        """
        JSON-ready mapping. created_at never leaves the process; year,
        runtime and genres are dropped when zero/empty.
        """
        out: Dict[str, Any] = {"id": self.id, "title": self.title}
        if self.year:
            out["year"] = self.year
        if self.runtime:
            out["runtime"] = Runtime(self.runtime).to_wire()
        if self.genres:
            out["genres"] = list(self.genres)
        out["version"] = self.version
        return out

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "Movie":
        return cls(
            id=data.get("id", 0),
            title=data.get("title", ""),
            year=data.get("year", 0),
            runtime=Runtime.parse(data["runtime"]) if "runtime" in data else Runtime(0),
            genres=data.get("genres"),
            version=data.get("version", 0),
        )


def validate_movie(v: Validator, movie: Movie) -> None:
    v.check(movie.title != "", "title", "must be provided")
    v.check(len(movie.title.encode("utf-8")) <= 500, "title", "must not be more than 500 bytes long")

    v.check(movie.year != 0, "year", "must be provided")
    v.check(movie.year >= 1888, "year", "must be greater than 1888")
    v.check(movie.year <= date.today().year, "year", "must not be in the future")

    v.check(movie.runtime != 0, "runtime", "must be provided")
    v.check(movie.runtime > 0, "runtime", "must be a positive integer")

    genres = movie.genres if movie.genres is not None else []
    v.check(movie.genres is not None, "genres", "must be provided")
    v.check(len(genres) >= 1, "genres", "must contain at least 1 genre")
    v.check(len(genres) <= 5, "genres", "must not contain more than 5 genres")
    v.check(unique(genres), "genres", "must not contain duplicate values")
