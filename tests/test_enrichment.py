"""Tests for merging LLM suggestions into captures."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from quickadd.core.enrichment import Enrichment, merge_enrichment
from quickadd.core.models import Attendee, CaptureSource, EventCapture, TaskCapture

TORONTO = ZoneInfo("America/Toronto")


@pytest.fixture
def event():
    return EventCapture(
        id="evt-1",
        title="Team meeting tomorrow",
        source=CaptureSource(url="https://example.com", title="Example"),
        tz="America/Toronto",
        confidence=0.6,
        start=datetime(2024, 1, 16, 14, 0, tzinfo=TORONTO),
        end=datetime(2024, 1, 16, 15, 0, tzinfo=TORONTO),
    )


@pytest.fixture
def task():
    return TaskCapture(
        id="task-1",
        title="Submit report",
        source=CaptureSource(url="https://example.com", title="Example"),
        tz="America/Toronto",
        confidence=0.7,
        due=datetime(2024, 1, 19, 17, 0, tzinfo=TORONTO),
    )


class TestFromApi:
    def test_reads_known_fields(self):
        enrichment = Enrichment.from_api(
            {
                "kind": "event",
                "title": " Team sync ",
                "location": "HQ",
                "attendees": [{"name": "Sam", "email": "SAM@X.IO"}, {"name": "no email"}],
                "confidence": 0.9,
                "priority": "HIGH",
            }
        )

        assert enrichment.title == "Team sync"
        assert enrichment.location == "HQ"
        assert enrichment.attendees == (Attendee(email="sam@x.io", name="Sam"),)
        assert enrichment.confidence == 0.9
        assert enrichment.priority == "high"

    def test_ignores_bad_values(self):
        enrichment = Enrichment.from_api({"title": "", "confidence": "very", "priority": "maybe", "attendees": "x"})

        assert enrichment == Enrichment()


class TestMergeEvent:
    def test_overrides_text_fields(self, event):
        merged = merge_enrichment(event, Enrichment(title="Team sync", location="HQ", notes="Bring slides"))

        assert merged.title == "Team sync"
        assert merged.location == "HQ"
        assert merged.notes == "Bring slides"
        assert merged.id == event.id

    def test_keeps_fields_without_suggestion(self, event):
        merged = merge_enrichment(event, Enrichment())

        assert merged.title == event.title
        assert merged.start == event.start

    def test_confidence_takes_the_max(self, event):
        assert merge_enrichment(event, Enrichment(confidence=0.3)).confidence == 0.6
        assert merge_enrichment(event, Enrichment(confidence=0.8)).confidence == 0.8

    def test_confidence_is_clamped(self, event):
        assert merge_enrichment(event, Enrichment(confidence=1.0)).confidence == 0.98

    def test_naive_times_take_capture_zone(self, event):
        merged = merge_enrichment(event, Enrichment(start="2024-01-16T15:00:00", end="2024-01-16T16:30:00"))

        assert merged.start == datetime(2024, 1, 16, 15, 0, tzinfo=TORONTO)
        assert merged.end == datetime(2024, 1, 16, 16, 30, tzinfo=TORONTO)

    def test_inverted_window_is_ignored(self, event):
        merged = merge_enrichment(event, Enrichment(start="2024-01-16T18:00:00"))

        assert merged.start == event.start
        assert merged.end == event.end

    def test_unparseable_time_is_ignored(self, event):
        merged = merge_enrichment(event, Enrichment(start="tomorrow-ish"))

        assert merged.start == event.start

    def test_kind_never_changes(self, event):
        merged = merge_enrichment(event, Enrichment(due="2024-01-20T10:00:00", priority="high"))

        assert isinstance(merged, EventCapture)
        assert merged.kind == "event"


class TestMergeTask:
    def test_due_and_priority(self, task):
        merged = merge_enrichment(task, Enrichment(due="2024-01-18T12:00:00-05:00", priority="low"))

        assert merged.due == datetime(2024, 1, 18, 12, 0, tzinfo=TORONTO)
        assert merged.priority == "low"

    def test_event_fields_are_ignored(self, task):
        merged = merge_enrichment(task, Enrichment(start="2024-01-18T12:00:00"))

        assert merged.due == task.due
        assert isinstance(merged, TaskCapture)

    def test_suggested_offset_is_converted_to_capture_zone(self, task):
        merged = merge_enrichment(task, Enrichment(due="2024-01-18T17:00:00+00:00"))

        assert merged.due == datetime(2024, 1, 18, 12, 0, tzinfo=TORONTO)
        assert merged.due.tzinfo == TORONTO
        assert merged.due.utcoffset().total_seconds() == -5 * 3600


class TestFromApiMalformed:
    def test_non_string_emails_are_skipped(self):
        enrichment = Enrichment.from_api(
            {"attendees": [{"email": 5}, {"email": ["a@b.c"]}, {"email": "ok@example.com", "name": 7}]}
        )

        assert enrichment.attendees == (Attendee(email="ok@example.com"),)

    def test_no_usable_attendees(self):
        assert Enrichment.from_api({"attendees": [{"email": None}, "ana@example.com"]}).attendees is None
