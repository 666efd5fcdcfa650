"""Ports - interfaces/protocols for external dependencies."""

from .recognizer import DateRecognizer
from .provider import CaptureProvider
from .enricher import Enricher
from .history_store import HistoryStore

__all__ = [
    "DateRecognizer",
    "CaptureProvider",
    "Enricher",
    "HistoryStore",
]
