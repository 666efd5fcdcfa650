"""Tests for the shared workflow layer."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from quickadd.adapters.file_history import FileHistoryStore
from quickadd.adapters.google_calendar import GoogleCalendarProvider, GoogleTasksProvider
from quickadd.adapters.ics_file import IcsFileProvider
from quickadd.adapters.llm_enrichment import GeminiEnricher, HuggingFaceEnricher
from quickadd.config import Config
from quickadd.core.enrichment import Enrichment
from quickadd.core.history import history_item_for
from quickadd.core.models import CaptureSource, EventCapture, TaskCapture
from quickadd.core.providers import CreateResult, ProviderKind
from quickadd.workflows import (
    DUPLICATE_WARNING,
    get_enricher,
    get_provider,
    parse_selection,
    submit_capture,
)

TORONTO = ZoneInfo("America/Toronto")
NOW = "2024-01-15T09:00:00"


class FakeProvider:
    """Capture provider that returns a canned result and records captures."""

    def __init__(self, result):
        self.result = result
        self.created = []

    def create(self, capture):
        self.created.append(capture)
        return self.result


class FakeEnricher:
    def __init__(self, enrichment):
        self.enrichment = enrichment
        self.requests = []

    def enhance(self, request):
        self.requests.append(request)
        return self.enrichment


@pytest.fixture
def config(tmp_path):
    return Config(
        timezone="America/Toronto",
        ics_output_dir=str(tmp_path / "ics"),
        history_file=str(tmp_path / "history.json"),
    )


@pytest.fixture
def history(tmp_path):
    return FileHistoryStore(tmp_path / "history.json")


@pytest.fixture
def event():
    return EventCapture(
        id="evt-1",
        title="Team sync",
        source=CaptureSource(url="https://example.com", title="Example"),
        tz="America/Toronto",
        confidence=0.8,
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


class TestGetEnricher:
    def test_disabled(self):
        assert get_enricher(Config(ai_parser_enabled=False)) is None

    def test_gemini(self):
        enricher = get_enricher(Config(ai_parser_enabled=True, ai_parser_api_key="k", ai_parser_timeout=3.0))
        assert isinstance(enricher, GeminiEnricher)
        assert enricher.timeout == 3.0

    def test_huggingface(self):
        enricher = get_enricher(Config(ai_parser_enabled=True, ai_parser_provider="huggingface"))
        assert isinstance(enricher, HuggingFaceEnricher)

    def test_local_has_no_adapter(self):
        assert get_enricher(Config(ai_parser_enabled=True, ai_parser_provider="local")) is None


class TestGetProvider:
    def test_ics_uses_configured_dir(self, config, tmp_path):
        provider = get_provider(ProviderKind.ICS, config)
        assert isinstance(provider, IcsFileProvider)
        assert provider.output_dir == tmp_path / "ics"

    def test_google(self, config):
        assert isinstance(get_provider(ProviderKind.GOOGLE_CALENDAR, config), GoogleCalendarProvider)
        assert isinstance(get_provider(ProviderKind.GOOGLE_TASKS, config), GoogleTasksProvider)


class TestParseSelection:
    def test_uses_config_timezone(self, config, recognizer, candidate):
        rec = recognizer(candidate("tomorrow at 2pm", datetime(2024, 1, 16, 14, 0)))

        result = parse_selection("Team meeting tomorrow at 2pm", config, now=NOW, recognizer=rec, enricher=None)

        assert result.capture.kind == "event"
        assert result.capture.tz == "America/Toronto"
        assert result.capture.start == datetime(2024, 1, 16, 14, 0, tzinfo=TORONTO)
        assert "enriched" not in result.diagnostics

    def test_explicit_timezone_wins(self, config, recognizer):
        result = parse_selection("Buy milk", config, timezone="Europe/Paris", now=NOW, recognizer=recognizer())
        assert result.capture.tz == "Europe/Paris"

    def test_enrichment_is_merged(self, config, recognizer, candidate):
        rec = recognizer(candidate("tomorrow at 2pm", datetime(2024, 1, 16, 14, 0)))
        enricher = FakeEnricher(Enrichment(title="Team meeting", location="Room 4", confidence=0.95))

        result = parse_selection(
            "Team meeting tomorrow at 2pm",
            config,
            url="https://example.com",
            page_title="Example",
            now=NOW,
            recognizer=rec,
            enricher=enricher,
        )

        assert result.capture.title == "Team meeting"
        assert result.capture.location == "Room 4"
        assert result.capture.confidence == 0.95
        assert result.diagnostics["enriched"] is True
        assert result.diagnostics["chosen_kind"] == "event"
        assert enricher.requests[0].url == "https://example.com"

    def test_failed_enrichment_keeps_local_parse(self, config, recognizer):
        result = parse_selection("Buy milk", config, now=NOW, recognizer=recognizer(), enricher=FakeEnricher(None))

        assert result.capture.title == "Buy milk"
        assert "enriched" not in result.diagnostics


class TestSubmitCapture:
    def test_success_records_history(self, config, history, event):
        adapter = FakeProvider(CreateResult(ok=True, provider=ProviderKind.ICS, id="evt-1", warning="Saved ICS file"))

        result = submit_capture(event, config, history=history, adapter=adapter)

        assert result.ok
        assert result.warning == "Saved ICS file"
        assert adapter.created == [event]
        [item] = history.read()
        assert item.id == "evt-1"
        assert item.provider == "ics"

    def test_duplicate_is_not_submitted(self, config, history, event):
        history.write([history_item_for(event, "ics", datetime(2024, 1, 15, 9, 0, tzinfo=TORONTO))])
        adapter = FakeProvider(CreateResult(ok=True, provider=ProviderKind.ICS))

        result = submit_capture(event, config, history=history, adapter=adapter)

        assert not result.ok
        assert result.deduped
        assert result.id == "evt-1"
        assert result.warning == DUPLICATE_WARNING
        assert result.error is None
        assert adapter.created == []

    def test_allow_duplicates(self, config, history, event):
        history.write([history_item_for(event, "ics", datetime(2024, 1, 15, 9, 0, tzinfo=TORONTO))])
        adapter = FakeProvider(CreateResult(ok=True, provider=ProviderKind.ICS))

        result = submit_capture(event, config, history=history, adapter=adapter, allow_duplicates=True)

        assert result.ok
        assert len(history.read()) == 2

    def test_reroute_note_replaces_warning(self, config, history, task):
        adapter = FakeProvider(CreateResult(ok=True, provider=ProviderKind.GOOGLE_TASKS, id="t-1", warning="Created"))

        result = submit_capture(
            task, config, provider=ProviderKind.GOOGLE_CALENDAR, history=history, adapter=adapter
        )

        assert result.warning == "Switched to Google Tasks for task capture."
        assert history.read()[0].provider == "google-tasks"

    def test_failure_keeps_provider_warning(self, config, history, event):
        adapter = FakeProvider(
            CreateResult(ok=False, provider=ProviderKind.GOOGLE_CALENDAR, error="boom", warning="Token expired")
        )

        result = submit_capture(
            event, config, provider=ProviderKind.GOOGLE_TASKS, history=history, adapter=adapter
        )

        assert not result.ok
        assert result.warning == "Token expired"
        assert history.read() == []

    def test_failure_without_warning_gets_note(self, config, history, event):
        adapter = FakeProvider(CreateResult(ok=False, provider=ProviderKind.GOOGLE_CALENDAR, error="boom"))

        result = submit_capture(
            event, config, provider=ProviderKind.GOOGLE_TASKS, history=history, adapter=adapter
        )

        assert result.warning == "Switched to Google Calendar for event capture."
        assert result.error == "boom"

    def test_defaults_to_configured_ics_provider(self, config, history, task, tmp_path):
        result = submit_capture(task, config, history=history)

        assert result.ok
        assert result.provider == ProviderKind.ICS
        assert (tmp_path / "ics" / "submit-report.ics").exists()
