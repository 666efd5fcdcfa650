"""Tests for the Gemini and Hugging Face enrichment adapters."""

from unittest.mock import MagicMock

import pytest
import requests

from quickadd.adapters.llm_enrichment import (
    GEMINI_URL,
    HUGGINGFACE_URL,
    GeminiEnricher,
    HuggingFaceEnricher,
    extract_json,
)
from quickadd.core.models import Attendee, ParseRequest


@pytest.fixture
def request_():
    return ParseRequest(
        text="Lunch with ana@example.com tomorrow at noon",
        url="https://example.com",
        page_title="Example",
        timezone="America/Toronto",
    )


def session_returning(payload):
    session = MagicMock()
    session.post.return_value.json.return_value = payload
    return session


def gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class TestExtractJson:
    def test_fenced_block(self):
        assert extract_json('Sure!\n```json\n{"title": "Lunch"}\n```') == {"title": "Lunch"}

    def test_bare_object(self):
        assert extract_json('Here you go: {"kind": "task"} hope it helps') == {"kind": "task"}

    def test_raw_text(self):
        assert extract_json('{"confidence": 0.9}') == {"confidence": 0.9}

    def test_not_an_object(self):
        with pytest.raises(ValueError):
            extract_json("[1, 2, 3]")

    def test_garbage(self):
        with pytest.raises(ValueError):
            extract_json("no json here")


class TestGeminiEnricher:
    def test_parses_answer(self, request_):
        session = session_returning(
            gemini_payload(
                '```json\n{"title": "Lunch with Ana", "location": "Cafe",'
                ' "attendees": [{"name": "Ana", "email": "ANA@example.com"}],'
                ' "priority": "High", "confidence": 0.9}\n```'
            )
        )

        enrichment = GeminiEnricher("key", timeout=2.0, session=session).enhance(request_)

        assert enrichment.title == "Lunch with Ana"
        assert enrichment.location == "Cafe"
        assert enrichment.attendees == (Attendee(email="ana@example.com", name="Ana"),)
        assert enrichment.priority == "high"
        assert enrichment.confidence == 0.9

        args, kwargs = session.post.call_args
        assert args == (GEMINI_URL,)
        assert kwargs["headers"]["X-goog-api-key"] == "key"
        assert kwargs["timeout"] == 2.0
        assert request_.text in kwargs["json"]["contents"][0]["parts"][0]["text"]

    def test_missing_key(self, request_):
        session = MagicMock()

        assert GeminiEnricher("", session=session).enhance(request_) is None
        session.post.assert_not_called()

    def test_http_error(self, request_):
        session = MagicMock()
        session.post.return_value.raise_for_status.side_effect = requests.HTTPError("429 Too Many Requests")

        assert GeminiEnricher("key", session=session).enhance(request_) is None

    def test_timeout(self, request_):
        session = MagicMock()
        session.post.side_effect = requests.Timeout("timed out")

        assert GeminiEnricher("key", session=session).enhance(request_) is None

    def test_unexpected_shape(self, request_):
        assert GeminiEnricher("key", session=session_returning({"candidates": []})).enhance(request_) is None

    def test_unparseable_answer(self, request_):
        session = session_returning(gemini_payload("I could not find an event."))
        assert GeminiEnricher("key", session=session).enhance(request_) is None

    def test_non_string_email(self, request_):
        session = session_returning(gemini_payload('{"title": "Lunch", "attendees": [{"email": 5}]}'))

        enrichment = GeminiEnricher("key", session=session).enhance(request_)

        assert enrichment.title == "Lunch"
        assert enrichment.attendees is None


class TestHuggingFaceEnricher:
    def test_parses_generated_text(self, request_):
        session = session_returning(
            [{"generated_text": 'Extract... {"kind":"event","title":"Lunch","confidence":0.7}'}]
        )

        enrichment = HuggingFaceEnricher("hf-key", session=session).enhance(request_)

        assert enrichment.title == "Lunch"
        assert enrichment.confidence == 0.7
        args, kwargs = session.post.call_args
        assert args == (HUGGINGFACE_URL,)
        assert kwargs["headers"] == {"Authorization": "Bearer hf-key"}

    def test_no_json_gives_empty_enrichment(self, request_):
        session = session_returning([{"generated_text": "nothing useful"}])

        enrichment = HuggingFaceEnricher("hf-key", session=session).enhance(request_)

        assert enrichment.title is None
        assert enrichment.confidence is None

    def test_missing_key(self, request_):
        assert HuggingFaceEnricher("", session=MagicMock()).enhance(request_) is None

    def test_connection_error(self, request_):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("offline")

        assert HuggingFaceEnricher("hf-key", session=session).enhance(request_) is None

    def test_malformed_attendees_are_dropped(self, request_):
        session = session_returning(
            [{"generated_text": '{"title":"Lunch","attendees":[{"email":5},{"email":"ANA@example.com"}]}'}]
        )

        enrichment = HuggingFaceEnricher("hf-key", session=session).enhance(request_)

        assert enrichment.title == "Lunch"
        assert enrichment.attendees == (Attendee(email="ana@example.com"),)
