"""Capture history storage interface."""

from typing import Protocol

from quickadd.core.history import HistoryItem


class HistoryStore(Protocol):
    """Interface for reading and writing submitted-capture history."""

    def read(self) -> list[HistoryItem]:
        """All stored items, oldest first."""
        ...

    def write(self, items: list[HistoryItem]) -> None:
        """Replace the stored history."""
        ...

    def clear(self) -> int:
        """Remove all items. Returns how many were removed."""
        ...
