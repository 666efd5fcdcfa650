"""LLM enrichment adapters - Gemini and Hugging Face over HTTP."""

import json
import logging
import re
from typing import Any

import requests

from quickadd.core.enrichment import Enrichment
from quickadd.core.models import ParseRequest

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash:generateContent"
HUGGINGFACE_URL = "https://api-inference.huggingface.co/models/mistralai/Mixtral-8x7B-Instruct-v0.1"

FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
BARE_JSON = re.compile(r"\{[\s\S]*\}")

GEMINI_PROMPT = """You are a smart assistant that extracts calendar events and tasks from text.
Analyze this text and extract event/task details in JSON format:

Text: "{text}"

Return ONLY valid JSON with this structure:
{{
  "kind": "event" or "task",
  "title": "short title",
  "start": "ISO datetime if event",
  "end": "ISO datetime if event",
  "due": "ISO datetime if task",
  "location": "location if mentioned",
  "attendees": [{{"name": "optional", "email": "if found"}}],
  "notes": "additional context",
  "priority": "low/medium/high",
  "confidence": 0.0-1.0
}}"""

HUGGINGFACE_PROMPT = """Extract event or task details from: "{text}"
Return JSON: {{"kind":"event/task","title":"...","start":"ISO date","confidence":0-1}}"""


def extract_json(text: str) -> dict[str, Any]:
    """
    Pull the JSON object out of a model answer.

    Accepts a ```json fenced block, a bare {...} span, or the raw text.
    Raises ValueError when nothing parses to an object.
    """
    match = FENCED_JSON.search(text) or BARE_JSON.search(text)
    if match:
        text = match.group(1) if match.groups() else match.group(0)
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Model answer is not a JSON object")
    return data


class GeminiEnricher:
    """
    Google Gemini enrichment.

    Implements Enricher protocol. Failures are logged and yield None.
    """

    def __init__(self, api_key: str, timeout: float = 8.0, session: requests.Session | None = None):
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()

    def enhance(self, request: ParseRequest) -> Enrichment | None:
        if not self.api_key:
            logger.warning("Gemini API key required")
            return None
        try:
            resp = self._session.post(
                GEMINI_URL,
                headers={"Content-Type": "application/json", "X-goog-api-key": self.api_key},
                json={
                    "contents": [{"parts": [{"text": GEMINI_PROMPT.format(text=request.text)}]}],
                    "generationConfig": {"temperature": 0.2, "maxOutputTokens": 500},
                },
                timeout=self.timeout,
            )
            resp.raise_for_status()
            answer = resp.json()["candidates"][0]["content"]["parts"][0]["text"]
            return Enrichment.from_api(extract_json(answer))
        except (requests.RequestException, KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            logger.warning(f"Gemini enrichment failed: {e}")
            return None


class HuggingFaceEnricher:
    """
    Hugging Face Inference API enrichment.

    Implements Enricher protocol. Failures are logged and yield None.
    """

    def __init__(self, api_key: str, timeout: float = 8.0, session: requests.Session | None = None):
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()

    def enhance(self, request: ParseRequest) -> Enrichment | None:
        if not self.api_key:
            logger.warning("Hugging Face API key required")
            return None
        try:
            resp = self._session.post(
                HUGGINGFACE_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "inputs": HUGGINGFACE_PROMPT.format(text=request.text),
                    "parameters": {"max_new_tokens": 300, "temperature": 0.2},
                },
                timeout=self.timeout,
            )
            resp.raise_for_status()
            generated = resp.json()[0].get("generated_text") or "{}"
            match = BARE_JSON.search(generated)
            data = json.loads(match.group(0)) if match else {}
            if not isinstance(data, dict):
                return None
            return Enrichment.from_api(data)
        except (requests.RequestException, KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            logger.warning(f"Hugging Face enrichment failed: {e}")
            return None
