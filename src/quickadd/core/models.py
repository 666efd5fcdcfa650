"""Capture data model - pure, immutable records."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

CaptureKind = Literal["event", "task"]
Priority = Literal["low", "medium", "high"]

EVENT: CaptureKind = "event"
TASK: CaptureKind = "task"

TITLE_LIMIT = 64


@dataclass(frozen=True)
class Attendee:
    """An invitee extracted from the selection."""

    email: str
    name: str | None = None


@dataclass(frozen=True)
class CaptureSource:
    """Where the selection came from."""

    url: str
    title: str


@dataclass(frozen=True)
class QuickAddDefaults:
    """Defaults injected into the parser."""

    duration_minutes: int = 60
    reminder_minutes: int = 10
    task_due_hour: int = 17
    task_due_minute: int = 0
    locale: str = "en"
    timezone: str = "UTC"


@dataclass(frozen=True, kw_only=True)
class Capture:
    """Fields shared by events and tasks."""

    id: str
    kind: CaptureKind
    title: str
    source: CaptureSource
    tz: str
    confidence: float
    notes: str | None = None
    location: str | None = None
    attendees: tuple[Attendee, ...] = ()
    reminder_minutes: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible values."""
        data: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "title": self.title,
            "notes": self.notes,
            "location": self.location,
            "attendees": [
                {"email": a.email, **({"name": a.name} if a.name else {})}
                for a in self.attendees
            ],
            "source": {"url": self.source.url, "title": self.source.title},
            "tz": self.tz,
            "confidence": self.confidence,
            "reminder_minutes": self.reminder_minutes,
        }
        data.update(self._variant_fields())
        return data

    def _variant_fields(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True, kw_only=True)
class EventCapture(Capture):
    """A calendar event with a concrete time window."""

    kind: CaptureKind = EVENT
    start: datetime
    end: datetime
    all_day: bool = False
    recurrence: str | None = None

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError("Event end must not be before its start")

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def _variant_fields(self) -> dict[str, Any]:
        return {
            "start": to_iso(self.start),
            "end": to_iso(self.end),
            "all_day": self.all_day,
            "recurrence": self.recurrence,
        }


@dataclass(frozen=True, kw_only=True)
class TaskCapture(Capture):
    """A to-do item with an optional due time."""

    kind: CaptureKind = TASK
    due: datetime | None = None
    priority: Priority | None = None
    recurrence: str | None = None

    def _variant_fields(self) -> dict[str, Any]:
        return {
            "due": to_iso(self.due) if self.due else None,
            "priority": self.priority,
            "recurrence": self.recurrence,
        }


@dataclass(frozen=True)
class ParseRequest:
    """Input to a single parse call."""

    text: str
    url: str
    page_title: str
    timezone: str
    forced_kind: CaptureKind | None = None
    now: datetime | str | None = None


@dataclass(frozen=True)
class ParseResult:
    """Primary capture plus optional ranked alternatives."""

    capture: Capture
    alternatives: tuple[Capture, ...] | None = None
    warnings: tuple[str, ...] | None = None
    diagnostics: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"capture": self.capture.to_dict()}
        if self.alternatives:
            data["alternatives"] = [a.to_dict() for a in self.alternatives]
        if self.warnings:
            data["warnings"] = list(self.warnings)
        data["diagnostics"] = dict(self.diagnostics)
        return data


def to_iso(dt: datetime) -> str:
    """ISO-8601 with offset and without fractional seconds."""
    if dt.tzinfo is None:
        raise ValueError("Cannot serialize a naive datetime")
    return dt.replace(microsecond=0).isoformat()


def infer_title(text: str) -> str:
    """Trimmed text, ellipsized to the display limit."""
    trimmed = text.strip()
    if len(trimmed) <= TITLE_LIMIT:
        return trimmed
    return f"{trimmed[:TITLE_LIMIT - 3]}..."


def capture_from_dict(data: dict[str, Any]) -> Capture:
    """Rebuild a Capture from its serialized form."""
    common = dict(
        id=data["id"],
        title=data.get("title", ""),
        source=CaptureSource(
            url=data.get("source", {}).get("url", ""),
            title=data.get("source", {}).get("title", ""),
        ),
        tz=data["tz"],
        confidence=float(data.get("confidence", 0.1)),
        notes=data.get("notes"),
        location=data.get("location"),
        attendees=tuple(
            Attendee(email=a["email"], name=a.get("name"))
            for a in data.get("attendees") or []
        ),
        reminder_minutes=data.get("reminder_minutes"),
    )
    if data["kind"] == EVENT:
        return EventCapture(
            **common,
            start=datetime.fromisoformat(data["start"]),
            end=datetime.fromisoformat(data["end"]),
            all_day=bool(data.get("all_day", False)),
            recurrence=data.get("recurrence"),
        )
    if data["kind"] == TASK:
        due = data.get("due")
        return TaskCapture(
            **common,
            due=datetime.fromisoformat(due) if due else None,
            priority=data.get("priority"),
            recurrence=data.get("recurrence"),
        )
    raise ValueError(f"Unknown capture kind: {data['kind']!r}")
