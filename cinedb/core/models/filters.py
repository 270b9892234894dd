# cinedb/core/models/filters.py
import math
from dataclasses import dataclass

from cinedb.core.validator import Validator

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100


@dataclass
class Filters:
    page: int = 1
    page_size: int = 20

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def validate_filters(v: Validator, f: Filters) -> None:
    v.check(f.page > 0, "page", "must be greater than zero")
    v.check(f.page <= MAX_PAGE, "page", "must be a maximum of 10 million")
    v.check(f.page_size > 0, "page_size", "must be greater than zero")
    v.check(f.page_size <= MAX_PAGE_SIZE, "page_size", "must be a maximum of 100")


@dataclass
class Metadata:
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0

    @classmethod
    def calculate(cls, total_records: int, page: int, page_size: int) -> "Metadata":
        if total_records == 0:
            return cls()
        return cls(
            current_page=page,
            page_size=page_size,
            first_page=1,
            last_page=math.ceil(total_records / page_size),
            total_records=total_records,
        )

    def to_wire(self) -> dict:
        if not self.total_records:
            return {}
        return {
            "current_page": self.current_page,
            "page_size": self.page_size,
            "first_page": self.first_page,
            "last_page": self.last_page,
            "total_records": self.total_records,
        }
