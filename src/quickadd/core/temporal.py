"""Temporal resolution - turns recognizer candidates into aware datetimes.

Pure functions - no I/O. The recognizer itself lives behind the
DateRecognizer port; this module only normalizes what it reports.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class InvalidTimezoneError(ValueError):
    """Raised when a timezone identifier cannot be resolved."""

    pass


@dataclass(frozen=True)
class ParsedComponents:
    """One side (start or end) of a recognizer match.

    value is the naive wall-clock datetime the recognizer produced; certain
    names the components that were explicitly present in the text.
    """

    value: datetime
    certain: frozenset[str] = field(default_factory=frozenset)
    timezone_offset: int | None = None

    def is_certain(self, component: str) -> bool:
        return component in self.certain


@dataclass(frozen=True)
class TemporalCandidate:
    """A single ranked date/time interpretation."""

    text: str
    start: ParsedComponents
    end: ParsedComponents | None = None
    index: int = 0


@dataclass(frozen=True)
class ResolvedSpan:
    """A candidate after timezone normalization."""

    start: datetime
    end: datetime
    all_day: bool
    explicit_end: bool


def resolve_timezone(name: str) -> ZoneInfo:
    """Resolve an IANA identifier, raising InvalidTimezoneError if unknown."""
    if not name:
        raise InvalidTimezoneError("Timezone identifier is empty")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimezoneError(f"Unknown timezone: {name!r}") from e


def reference_now(tz: tzinfo, override: datetime | str | None = None) -> datetime:
    """The aware "now" used as the parse reference.

    An ISO string override is read as wall-clock time in tz unless it carries
    its own offset, in which case it is converted into tz.
    """
    if override is None:
        return datetime.now(tz)
    if isinstance(override, str):
        override = datetime.fromisoformat(override)
    if override.tzinfo is None:
        return override.replace(tzinfo=tz)
    return override.astimezone(tz)


def is_all_day(components: ParsedComponents | None) -> bool:
    """All-day when neither hour nor minute was stated."""
    if components is None:
        return False
    return not components.is_certain("hour") and not components.is_certain("minute")


def to_zone(components: ParsedComponents, tz: tzinfo) -> datetime:
    """Convert a recognizer component set into an aware datetime in tz."""
    if components.timezone_offset is not None:
        utc_value = components.value.replace(tzinfo=timezone.utc)
        return (utc_value - timedelta(minutes=components.timezone_offset)).astimezone(tz)
    return components.value.replace(tzinfo=tz)


def ensure_duration(start: datetime, end: datetime | None, default_minutes: int) -> datetime:
    """Explicit end when given, otherwise start plus the default duration."""
    if end is not None:
        return end
    return start + timedelta(minutes=default_minutes)


def resolve_span(candidate: TemporalCandidate, tz: tzinfo, default_minutes: int) -> ResolvedSpan:
    """Normalize a candidate into a start/end window in tz.

    An explicit end that lands before the start is discarded in favour of the
    default duration so the window is never inverted.
    """
    start = to_zone(candidate.start, tz)
    end = to_zone(candidate.end, tz) if candidate.end is not None else None
    if end is not None and end < start:
        end = None
    return ResolvedSpan(
        start=start,
        end=ensure_duration(start, end, default_minutes),
        all_day=is_all_day(candidate.start),
        explicit_end=end is not None,
    )


def default_task_due(now: datetime, due_hour: int, due_minute: int) -> datetime:
    """Today at the configured due time, or tomorrow if that has passed."""
    candidate = now.replace(hour=due_hour, minute=due_minute, second=0, microsecond=0)
    if candidate < now:
        return candidate + timedelta(days=1)
    return candidate


def at_due_time(value: datetime, due_hour: int, due_minute: int) -> datetime:
    """Move a date-only value to the configured due time on the same day."""
    return value.replace(hour=due_hour, minute=due_minute, second=0, microsecond=0)
