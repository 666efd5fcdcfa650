"""Merging optional LLM suggestions into a locally parsed capture."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from .confidence import clamp_confidence
from .models import Attendee, Capture, EventCapture, TaskCapture
from .temporal import resolve_timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Enrichment:
    """Fields suggested by an external model. None means "no opinion"."""

    title: str | None = None
    location: str | None = None
    attendees: tuple[Attendee, ...] | None = None
    notes: str | None = None
    confidence: float | None = None
    start: str | None = None
    end: str | None = None
    due: str | None = None
    priority: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Enrichment":
        """Build from a model's JSON answer, ignoring unknown or empty keys."""
        def text(key: str, source: dict[str, Any] = data) -> str | None:
            value = source.get(key)
            if not isinstance(value, str):
                return None
            return value.strip() or None

        attendees = None
        if isinstance(data.get("attendees"), list):
            attendees = tuple(
                Attendee(email=text("email", a).lower(), name=text("name", a))
                for a in data["attendees"]
                if isinstance(a, dict) and text("email", a)
            )

        confidence = data.get("confidence")
        priority = text("priority")
        return cls(
            title=text("title"),
            location=text("location"),
            attendees=attendees or None,
            notes=text("notes"),
            confidence=float(confidence) if isinstance(confidence, (int, float)) else None,
            start=text("start"),
            end=text("end"),
            due=text("due"),
            priority=priority.lower() if priority and priority.lower() in ("low", "medium", "high") else None,
        )


def _parse_instant(value: str | None, capture: Capture) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.debug(f"Ignoring unparseable suggested time: {value!r}")
        return None
    tz = resolve_timezone(capture.tz)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz)
    return parsed.astimezone(tz)


def merge_enrichment(capture: Capture, enrichment: Enrichment) -> Capture:
    """
    Overlay suggested fields onto a capture.

    Pure function - returns a new capture; the kind never changes.
    """
    changes: dict[str, Any] = {
        "title": enrichment.title or capture.title,
        "location": enrichment.location or capture.location,
        "attendees": enrichment.attendees or capture.attendees,
        "notes": enrichment.notes or capture.notes,
        "confidence": clamp_confidence(max(capture.confidence, enrichment.confidence or 0)),
    }

    if isinstance(capture, EventCapture):
        start = _parse_instant(enrichment.start, capture) or capture.start
        end = _parse_instant(enrichment.end, capture) or capture.end
        if end < start:
            start, end = capture.start, capture.end
        changes.update(start=start, end=end)
    elif isinstance(capture, TaskCapture):
        changes["due"] = _parse_instant(enrichment.due, capture) or capture.due
        changes["priority"] = enrichment.priority or capture.priority

    return replace(capture, **changes)
