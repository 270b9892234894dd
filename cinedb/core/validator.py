# cinedb/core/validator.py
"""Field-keyed validation error accumulator."""

from types import MappingProxyType
from typing import Dict, Hashable, Iterable, Mapping


class Validator:
    """
    Collects human-readable failures keyed by field name.

    Checks never short-circuit: every rule is evaluated, and the first
    message recorded for a field is the one that sticks.
    """

    def __init__(self) -> None:
        self._errors: Dict[str, str] = {}

    @property
    def errors(self) -> Mapping[str, str]:
        return MappingProxyType(self._errors)

    def valid(self) -> bool:
        return not self._errors

    def add_error(self, field: str, message: str) -> None:
        self._errors.setdefault(field, message)

    def check(self, ok: bool, field: str, message: str) -> None:
        if not ok:
            self.add_error(field, message)


def unique(values: Iterable[Hashable]) -> bool:
    """True if every element is distinct (case-sensitive for strings)."""
    seen = set()
    for v in values:
        if v in seen:
            return False
        seen.add(v)
    return True
