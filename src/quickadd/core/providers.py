"""Provider selection - which backend receives a capture."""

from dataclasses import dataclass
from enum import Enum

from .models import EVENT, TASK, CaptureKind


class ProviderKind(str, Enum):
    """Supported submission targets."""

    GOOGLE_CALENDAR = "google-calendar"
    GOOGLE_TASKS = "google-tasks"
    ICS = "ics"


@dataclass(frozen=True)
class CreateResult:
    """Outcome of submitting a capture."""

    ok: bool
    provider: ProviderKind
    id: str | None = None
    url: str | None = None
    warning: str | None = None
    deduped: bool = False
    error: str | None = None


def route_provider(
    kind: CaptureKind,
    requested: ProviderKind,
) -> tuple[ProviderKind, str | None]:
    """
    Map the requested provider onto one that accepts this kind.

    Returns (provider, note); note explains any switch. Pure function.
    """
    if kind == EVENT and requested == ProviderKind.GOOGLE_TASKS:
        return ProviderKind.GOOGLE_CALENDAR, "Switched to Google Calendar for event capture."
    if kind == TASK and requested == ProviderKind.GOOGLE_CALENDAR:
        return ProviderKind.GOOGLE_TASKS, "Switched to Google Tasks for task capture."
    return requested, None
