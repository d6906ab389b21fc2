"""Result types for lookups that may not match a row."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class NotFound:
    """
    Returned instead of a row when a lookup has no match.

    It is falsy, so ``if not result`` reads the same as for an empty dict,
    but callers can tell it apart from a real row with ``isinstance``.
    """

    entity: str
    key: Any = None

    def __bool__(self) -> bool:
        return False

    @property
    def message(self) -> str:
        """Human readable description for error responses."""
        if self.key is None:
            return f"{self.entity} not found"
        return f"{self.entity} {self.key} not found"
