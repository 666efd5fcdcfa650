"""Confirmation card state - immutable snapshots and pure transitions.

Front ends keep the latest ConfirmationState, apply a transition, and
re-render from the new snapshot. Nothing here mutates a capture.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from .models import Capture, EventCapture, ParseResult, TaskCapture, infer_title
from .providers import CreateResult
from .temporal import resolve_timezone

EDITABLE_TEXT_FIELDS = ("title", "location", "notes")


class CardStatus(Enum):
    """Where the card is in its lifecycle."""

    REVIEWING = "reviewing"
    SUBMITTED = "submitted"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ConfirmationState:
    """A snapshot of the confirmation card."""

    draft: Capture
    alternatives: tuple[Capture, ...] = ()
    warnings: tuple[str, ...] = ()
    editing: bool = False
    status: CardStatus = CardStatus.REVIEWING
    message: str | None = None

    @property
    def is_open(self) -> bool:
        return self.status == CardStatus.REVIEWING


def start_confirmation(result: ParseResult) -> ConfirmationState:
    """Initial snapshot for a fresh parse result."""
    return ConfirmationState(
        draft=result.capture,
        alternatives=result.alternatives or (),
        warnings=result.warnings or (),
    )


def choose_alternative(state: ConfirmationState, index: int) -> ConfirmationState:
    """Promote an alternative to the draft; the old draft takes its slot."""
    if not 0 <= index < len(state.alternatives):
        raise IndexError(f"No alternative at position {index}")
    alternatives = list(state.alternatives)
    chosen = alternatives[index]
    alternatives[index] = state.draft
    return replace(state, draft=chosen, alternatives=tuple(alternatives))


def switch_kind(state: ConfirmationState, result: ParseResult) -> ConfirmationState:
    """
    Replace the card with a re-parse as the other kind.

    Title, location, notes and attendees edited on the old draft carry over
    to the new draft and its alternatives.
    """
    old = state.draft
    carried = {
        "title": old.title,
        "location": old.location,
        "notes": old.notes,
        "attendees": old.attendees,
    }
    return ConfirmationState(
        draft=replace(result.capture, **carried),
        alternatives=tuple(replace(alt, **carried) for alt in result.alternatives or ()),
        warnings=result.warnings or (),
    )


def toggle_editing(state: ConfirmationState) -> ConfirmationState:
    return replace(state, editing=not state.editing)


def update_field(state: ConfirmationState, field: str, value) -> ConfirmationState:
    """
    Edit one field of the draft.

    Moving an event's start keeps its duration; an end before the start is
    rejected with ValueError.
    """
    draft = state.draft
    if field in EDITABLE_TEXT_FIELDS:
        text = (value or "").strip()
        if field == "title":
            return replace(state, draft=replace(draft, title=infer_title(text)))
        return replace(state, draft=replace(draft, **{field: text or None}))

    if isinstance(draft, EventCapture) and field == "start":
        start = _localize(value, draft)
        return replace(state, draft=replace(draft, start=start, end=start + (draft.end - draft.start)))
    if isinstance(draft, EventCapture) and field == "end":
        end = _localize(value, draft)
        if end < draft.start:
            raise ValueError("End time cannot be before the start time")
        return replace(state, draft=replace(draft, end=end))
    if isinstance(draft, TaskCapture) and field == "due":
        due = _localize(value, draft) if value is not None else None
        return replace(state, draft=replace(draft, due=due))

    raise ValueError(f"Field {field!r} cannot be edited on a {draft.kind}")


def mark_submitted(state: ConfirmationState, outcome: CreateResult) -> ConfirmationState:
    """Close the card with the provider's answer."""
    if outcome.ok:
        message = outcome.warning or "Created."
        return replace(state, status=CardStatus.SUBMITTED, message=message, editing=False)
    message = outcome.error or outcome.warning or "Could not create item."
    if outcome.deduped:
        return replace(state, status=CardStatus.FAILED, message=message)
    # A failed submission leaves the card open so the user can retry.
    return replace(state, message=message)


def cancel(state: ConfirmationState) -> ConfirmationState:
    return replace(state, status=CardStatus.CANCELLED, message="Cancelled.", editing=False)


def _localize(value: datetime | str, capture: Capture) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    tz = resolve_timezone(capture.tz)
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


# ============== Rendering ==============


def format_window(capture: EventCapture) -> str:
    day = capture.start.strftime("%a, %b %d")
    if capture.all_day:
        return f"{day} (all day)"
    if capture.start.date() == capture.end.date():
        return f"{day} {capture.start.strftime('%H:%M')}-{capture.end.strftime('%H:%M')}"
    return f"{day} {capture.start.strftime('%H:%M')} - {capture.end.strftime('%a, %b %d %H:%M')}"


def format_due(capture: TaskCapture) -> str:
    if not capture.due:
        return "No due date"
    return f"Due {capture.due.strftime('%a, %b %d %H:%M')}"


def format_when(capture: Capture) -> str:
    if isinstance(capture, EventCapture):
        return format_window(capture)
    if isinstance(capture, TaskCapture):
        return format_due(capture)
    return ""


def render_card(state: ConfirmationState) -> list[str]:
    """
    Project a snapshot into markdown lines for display.

    Pure function - the caller decides how to send them.
    """
    draft = state.draft
    badge = "Event suggestion" if draft.kind == "event" else "Task suggestion"
    lines = [f"*{badge}* ({round(draft.confidence * 100)}% sure)", "", f"**{draft.title or '(untitled)'}**"]
    lines.append(format_when(draft))

    if draft.location:
        lines.append(f"Location: {draft.location}")
    if draft.attendees:
        lines.append("Attendees: " + ", ".join(a.name or a.email for a in draft.attendees))
    if isinstance(draft, TaskCapture) and draft.priority:
        lines.append(f"Priority: {draft.priority}")
    if getattr(draft, "recurrence", None):
        lines.append("Repeats weekly")

    for warning in state.warnings:
        lines.append(f"> {warning}")

    if state.alternatives and state.is_open:
        lines.append("")
        lines.append("Other interpretations:")
        for i, alt in enumerate(state.alternatives, start=1):
            lines.append(f"{i}. {format_when(alt)}")

    if state.message:
        lines.append("")
        lines.append(state.message)

    return lines
