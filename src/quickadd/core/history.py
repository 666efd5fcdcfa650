"""Capture history and duplicate detection - pure logic."""

from dataclasses import asdict, dataclass
from datetime import datetime

from .models import Capture, EventCapture, TaskCapture, to_iso

HISTORY_LIMIT = 200


@dataclass(frozen=True)
class HistoryItem:
    """A capture that was successfully submitted."""

    id: str
    kind: str
    title: str
    source_url: str
    provider: str
    created_at: str
    start: str | None = None
    end: str | None = None
    due: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryItem":
        return cls(
            id=data["id"],
            kind=data["kind"],
            title=data.get("title", ""),
            source_url=data.get("source_url", ""),
            provider=data.get("provider", ""),
            created_at=data.get("created_at", ""),
            start=data.get("start"),
            end=data.get("end"),
            due=data.get("due"),
        )


def history_item_for(capture: Capture, provider: str, created_at: datetime) -> HistoryItem:
    """Record a submitted capture."""
    start = end = due = None
    if isinstance(capture, EventCapture):
        start, end = to_iso(capture.start), to_iso(capture.end)
    elif isinstance(capture, TaskCapture) and capture.due:
        due = to_iso(capture.due)
    return HistoryItem(
        id=capture.id,
        kind=capture.kind,
        title=capture.title,
        source_url=capture.source.url,
        provider=provider,
        created_at=to_iso(created_at),
        start=start,
        end=end,
        due=due,
    )


def find_duplicate(capture: Capture, history: list[HistoryItem]) -> HistoryItem | None:
    """
    Find a previously submitted item that looks like the same capture.

    Same kind, same title (case-insensitive), same source URL and the same
    start (events) or due (tasks).
    """
    candidate = history_item_for(capture, provider="", created_at=datetime.now().astimezone())
    for item in history:
        if item.kind != candidate.kind:
            continue
        if item.title.lower() != candidate.title.lower():
            continue
        if item.source_url != candidate.source_url:
            continue
        if candidate.kind == "event" and item.start == candidate.start:
            return item
        if candidate.kind == "task" and item.due == candidate.due:
            return item
    return None


def trim_history(history: list[HistoryItem], limit: int = HISTORY_LIMIT) -> list[HistoryItem]:
    """Keep only the most recent entries."""
    return history[-limit:] if limit else []
