"""parsedatetime adapter - natural-language date/time recognition."""

import logging
import re
from dataclasses import replace
from datetime import datetime, timedelta

import parsedatetime

from quickadd.core.temporal import ParsedComponents, TemporalCandidate

logger = logging.getLogger(__name__)

DATE_FLAG = 1
TIME_FLAG = 2

# Words that join two matches into a single start/end range.
RANGE_JOINERS = {"-", "–", "to", "until", "till", "through"}

EVERY_PREFIX = re.compile(r"every\s+$", re.IGNORECASE)
# Room and hall numbers ("Room 204") are read as clock times by parsedatetime.
NUMBERED_PLACE = re.compile(r"\b(?:room|hall)\s?[a-z]?\d{1,4}\b", re.IGNORECASE)
# Deadlines too vague to pin to a date; left to the task classifier.
VAGUE_PHRASES = re.compile(
    r"\b(?:end|middle|start|beginning) of (?:the )?(?:day|week|month|quarter|year)\b|\beo[dwm]\b",
    re.IGNORECASE,
)
DATE_COMPONENTS = frozenset({"day", "month", "year"})
ZONE_SUFFIX = re.compile(
    r"^\s*(?:utc|gmt|z)(?:\s*([+-])(\d{1,2})(?::?(\d{2}))?)?\b",
    re.IGNORECASE,
)


class ParsedatetimeRecognizer:
    """
    Date recognizer backed by parsedatetime.

    Implements DateRecognizer protocol. Matches come back in the order they
    appear in the text; adjacent time (or date) matches joined by "to" or a
    dash become a single candidate with an explicit end.
    """

    def __init__(self, calendar: parsedatetime.Calendar | None = None):
        self._calendar = calendar or parsedatetime.Calendar(version=parsedatetime.VERSION_CONTEXT_STYLE)

    def recognize(self, text: str, reference: datetime) -> list[TemporalCandidate]:
        """Ranked candidates for text, relative to reference wall-clock time."""
        source_time = reference.replace(tzinfo=None)
        try:
            matches = self._calendar.nlp(mask_non_dates(text), sourceTime=source_time.timetuple()) or ()
        except (ValueError, OverflowError) as e:
            logger.warning(f"parsedatetime failed on {text!r}: {e}")
            return []

        candidates = []
        i = 0
        while i < len(matches):
            current = matches[i]
            following = matches[i + 1] if i + 1 < len(matches) else None
            if following is not None and _is_range(text, current, following):
                candidates.append(_candidate(text, current, following))
                i += 2
            else:
                candidates.append(_candidate(text, current, None))
                i += 1

        logger.debug(f"Recognized {len(candidates)} temporal candidate(s) in {text!r}")
        return candidates


def mask_non_dates(text: str) -> str:
    """
    Blank out numbered places and vague deadlines before recognition.

    Masked spans are replaced by spaces of the same length so match offsets
    still index into the original text.
    """
    masked = text
    for pattern in (NUMBERED_PLACE, VAGUE_PHRASES):
        masked = pattern.sub(lambda m: " " * len(m.group(0)), masked)
    return masked


def _flag(raw) -> int:
    # Context-style calendars may hand back a pdtContext instead of an int.
    return int(getattr(raw, "dateTimeFlag", raw))


def _components(text: str, match: tuple, base_date: datetime | None = None) -> ParsedComponents:
    value, raw_flag, _start, end_idx, _matched = match
    flag = _flag(raw_flag)

    certain = set()
    if flag & DATE_FLAG:
        certain.update(DATE_COMPONENTS)
    if flag & TIME_FLAG:
        certain.update({"hour", "minute"})
    else:
        value = value.replace(hour=0, minute=0, second=0, microsecond=0)

    if base_date is not None and not flag & DATE_FLAG:
        value = datetime.combine(base_date.date(), value.time())

    return ParsedComponents(
        value=value,
        certain=frozenset(certain),
        timezone_offset=zone_offset(text[end_idx:]),
    )


def _candidate(text: str, match: tuple, end_match: tuple | None) -> TemporalCandidate:
    _value, _flag_raw, start_idx, end_idx, _matched = match
    matched = text[start_idx:end_idx]
    start = _components(text, match)
    end = None
    if end_match is not None:
        end = _components(text, end_match, base_date=start.value)
        if end.is_certain("day") and not start.is_certain("day"):
            # "10am to 11am tomorrow" dates the start by the end
            start = replace(
                start,
                value=datetime.combine(end.value.date(), start.value.time()),
                certain=start.certain | DATE_COMPONENTS,
            )
        if end.value < start.value and not end.is_certain("day"):
            # "10pm to 1am" ends on the following day
            end = replace(end, value=end.value + timedelta(days=1))
        end_idx = end_match[3]
        matched = text[start_idx:end_idx]

    prefix = EVERY_PREFIX.search(text[:start_idx])
    if prefix:
        start_idx = prefix.start()
        matched = text[start_idx:end_idx]

    return TemporalCandidate(text=matched, start=start, end=end, index=start_idx)


def _is_range(text: str, first: tuple, second: tuple) -> bool:
    """Two time matches, or two date matches, separated only by a range joiner."""
    first_flag, second_flag = _flag(first[1]), _flag(second[1])
    both_times = first_flag & TIME_FLAG and second_flag & TIME_FLAG
    both_dates = first_flag & DATE_FLAG and second_flag & DATE_FLAG
    if not (both_times or both_dates):
        return False
    between = text[first[3]:second[2]].strip().lower()
    return between in RANGE_JOINERS


def zone_offset(following: str) -> int | None:
    """
    Offset in minutes for a UTC/GMT marker right after a match.

    "UTC" gives 0, "GMT+2" gives 120, "UTC-05:30" gives -330.
    """
    match = ZONE_SUFFIX.match(following)
    if not match:
        return None
    sign, hours, minutes = match.groups()
    if not sign:
        return 0
    total = int(hours) * 60 + int(minutes or 0)
    return total if sign == "+" else -total
