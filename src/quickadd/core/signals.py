"""Signal extraction - attendees, location and priority from free text.

Pure functions - no I/O. Pattern tables are immutable and can be swapped by
passing a different SignalPatterns instance.
"""

import re
from dataclasses import dataclass

from .models import Attendee, Priority

EMAIL_PATTERN = re.compile(r"([a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+)")

# Most specific first: the generic "at <place>" fallback must stay last.
LOCATION_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"room\s?\d{1,4}", re.IGNORECASE),
    re.compile(r"hall\s?[a-z]?\d*", re.IGNORECASE),
    re.compile(r"(zoom|meet|teams)\s*link[:\-]?\s*(https?://\S+)", re.IGNORECASE),
    re.compile(r"(https?://\S*(?:zoom|meet|teams|webex)\S*)", re.IGNORECASE),
    re.compile(r"at\s+([A-Za-z0-9 ,.-]{3,})", re.IGNORECASE),
)

PRIORITY_KEYWORDS: tuple[tuple[Priority, tuple[str, ...]], ...] = (
    ("high", ("urgent", "asap", "priority", "important", "critical")),
    ("medium", ("soon", "follow up", "remind", "next")),
    ("low", ("whenever", "sometime", "later")),
)


@dataclass(frozen=True)
class SignalPatterns:
    """Pattern tables used by the extractors."""

    email: re.Pattern = EMAIL_PATTERN
    locations: tuple[re.Pattern, ...] = LOCATION_PATTERNS
    priorities: tuple[tuple[Priority, tuple[str, ...]], ...] = PRIORITY_KEYWORDS


DEFAULT_PATTERNS = SignalPatterns()


def extract_attendees(text: str, patterns: SignalPatterns = DEFAULT_PATTERNS) -> tuple[Attendee, ...]:
    """Email-shaped substrings, lower-cased and de-duplicated in order."""
    seen: dict[str, None] = {}
    for match in patterns.email.finditer(text):
        seen.setdefault(match.group(1).lower(), None)
    return tuple(Attendee(email=email) for email in seen)


def extract_location(text: str, patterns: SignalPatterns = DEFAULT_PATTERNS) -> str | None:
    """First matching location pattern's most specific group."""
    for pattern in patterns.locations:
        match = pattern.search(text)
        if not match:
            continue
        groups = match.groups()
        if len(groups) >= 2 and groups[1]:
            return groups[1].strip()
        if groups and groups[0]:
            return groups[0].strip()
        return match.group(0).strip()
    return None


def detect_priority(text: str, patterns: SignalPatterns = DEFAULT_PATTERNS) -> Priority | None:
    """Priority from keyword membership; high beats medium beats low."""
    lower = text.lower()
    for level, keywords in patterns.priorities:
        if any(k in lower for k in keywords):
            return level
    return None
