"""Action search types and backend protocol."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class ActionMatch:
    """One ranked search hit.

    Attributes:
        label: The matched action phrase
        similarity: Score in [0, 1]; 1.0 means an exact match
    """

    label: str
    similarity: float

    def to_dict(self) -> dict[str, object]:
        return {"name": self.label, "similarity": self.similarity}


@runtime_checkable
class ActionSearchBackend(Protocol):
    """Free-text lookup over a catalog of action labels."""

    def search(self, query: str, limit: int = 10) -> list[ActionMatch]: ...
