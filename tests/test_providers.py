"""Tests for provider routing and the ICS file provider."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from quickadd.adapters.ics_file import IcsFileProvider
from quickadd.core.models import CaptureSource, TaskCapture
from quickadd.core.providers import ProviderKind, route_provider

TORONTO = ZoneInfo("America/Toronto")


class TestRouteProvider:
    def test_event_to_tasks_switches_to_calendar(self):
        provider, note = route_provider("event", ProviderKind.GOOGLE_TASKS)
        assert provider == ProviderKind.GOOGLE_CALENDAR
        assert note == "Switched to Google Calendar for event capture."

    def test_task_to_calendar_switches_to_tasks(self):
        provider, note = route_provider("task", ProviderKind.GOOGLE_CALENDAR)
        assert provider == ProviderKind.GOOGLE_TASKS
        assert note == "Switched to Google Tasks for task capture."

    @pytest.mark.parametrize(
        "kind,requested",
        [
            ("event", ProviderKind.GOOGLE_CALENDAR),
            ("task", ProviderKind.GOOGLE_TASKS),
            ("event", ProviderKind.ICS),
            ("task", ProviderKind.ICS),
        ],
    )
    def test_compatible_provider_is_kept(self, kind, requested):
        assert route_provider(kind, requested) == (requested, None)

    def test_kind_values(self):
        assert ProviderKind("google-calendar") is ProviderKind.GOOGLE_CALENDAR


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


class TestIcsFileProvider:
    def test_writes_file(self, tmp_path, task):
        result = IcsFileProvider(tmp_path / "out").create(task)

        path = tmp_path / "out" / "submit-report.ics"
        assert result.ok
        assert result.provider == ProviderKind.ICS
        assert result.warning == "Saved ICS file"
        assert result.url == path.resolve().as_uri()
        assert path.read_bytes().startswith(b"BEGIN:VCALENDAR\r\n")

    def test_never_overwrites(self, tmp_path, task):
        provider = IcsFileProvider(tmp_path)
        provider.create(task)
        provider.create(task)
        provider.create(task)

        names = sorted(p.name for p in tmp_path.iterdir())
        assert names == ["submit-report-1.ics", "submit-report-2.ics", "submit-report.ics"]

    def test_unwritable_directory(self, tmp_path, task):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        result = IcsFileProvider(blocker / "sub").create(task)

        assert not result.ok
        assert "Could not write ICS file" in result.error
