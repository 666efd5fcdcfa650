"""File-based capture history adapter."""

import json
import logging
from pathlib import Path

from quickadd.core.history import HISTORY_LIMIT, HistoryItem, trim_history

logger = logging.getLogger(__name__)


class FileHistoryStore:
    """
    JSON file history storage.

    Implements HistoryStore protocol. Keeps at most the newest 200 items.
    """

    def __init__(self, path: Path | str, limit: int = HISTORY_LIMIT):
        self.path = Path(path).expanduser()
        self.limit = limit

    def read(self) -> list[HistoryItem]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read history from {self.path}: {e}")
            return []

        items = []
        for entry in data if isinstance(data, list) else []:
            try:
                items.append(HistoryItem.from_dict(entry))
            except (KeyError, TypeError):
                logger.debug(f"Skipping malformed history entry: {entry!r}")
        return items

    def write(self, items: list[HistoryItem]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        kept = trim_history(items, self.limit)
        self.path.write_text(json.dumps([item.to_dict() for item in kept], indent=2))

    def append(self, item: HistoryItem) -> None:
        self.write([*self.read(), item])

    def clear(self) -> int:
        count = len(self.read())
        if self.path.exists():
            self.path.unlink()
        return count
