"""Shared fixtures for the capture parser tests."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from quickadd.core.temporal import ParsedComponents, TemporalCandidate

TZ_NAME = "America/Toronto"
DATE_ONLY = frozenset({"day", "month", "year"})
DATE_AND_TIME = DATE_ONLY | {"hour", "minute"}


class ScriptedRecognizer:
    """Date recognizer that returns canned candidates and records its calls."""

    def __init__(self, candidates=()):
        self.candidates = list(candidates)
        self.calls = []

    def recognize(self, text, reference):
        self.calls.append((text, reference))
        return list(self.candidates)


@pytest.fixture
def tz():
    return ZoneInfo(TZ_NAME)


@pytest.fixture
def monday_9am():
    """Reference "now": Monday 15 January 2024, 09:00 local."""
    return datetime(2024, 1, 15, 9, 0)


@pytest.fixture
def candidate():
    """Factory for recognizer candidates."""

    def make(text, start, end=None, *, timed=True, offset=None, index=0):
        certain = DATE_AND_TIME if timed else DATE_ONLY
        return TemporalCandidate(
            text=text,
            start=ParsedComponents(value=start, certain=certain, timezone_offset=offset),
            end=ParsedComponents(value=end, certain=certain, timezone_offset=offset) if end else None,
            index=index,
        )

    return make


@pytest.fixture
def recognizer():
    """Factory for a ScriptedRecognizer."""

    def make(*candidates):
        return ScriptedRecognizer(candidates)

    return make
