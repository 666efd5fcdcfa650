"""Adapters - I/O implementations of ports."""

from .parsedatetime_recognizer import ParsedatetimeRecognizer
from .google_calendar import AuthenticationError, GoogleCalendarProvider, GoogleCredentials, GoogleTasksProvider
from .ics_file import IcsFileProvider
from .llm_enrichment import GeminiEnricher, HuggingFaceEnricher
from .file_history import FileHistoryStore

__all__ = [
    "ParsedatetimeRecognizer",
    "AuthenticationError",
    "GoogleCredentials",
    "GoogleCalendarProvider",
    "GoogleTasksProvider",
    "IcsFileProvider",
    "GeminiEnricher",
    "HuggingFaceEnricher",
    "FileHistoryStore",
]
