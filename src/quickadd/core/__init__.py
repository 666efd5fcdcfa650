"""Functional core - pure capture parsing logic with no I/O."""

from .models import (
    Attendee,
    Capture,
    CaptureSource,
    EventCapture,
    ParseRequest,
    ParseResult,
    QuickAddDefaults,
    TaskCapture,
    capture_from_dict,
)
from .temporal import InvalidTimezoneError, ParsedComponents, TemporalCandidate
from .signals import extract_attendees, extract_location, detect_priority
from .classifier import KindClassifier, Classification
from .confidence import compute_confidence
from .builder import CaptureBuilder, parse_capture
from .enrichment import Enrichment, merge_enrichment
from .ics import capture_to_ics, ics_filename
from .history import HistoryItem, find_duplicate, history_item_for
from .providers import CreateResult, ProviderKind, route_provider

__all__ = [
    # Models
    "Attendee",
    "Capture",
    "CaptureSource",
    "EventCapture",
    "ParseRequest",
    "ParseResult",
    "QuickAddDefaults",
    "TaskCapture",
    "capture_from_dict",
    # Temporal
    "InvalidTimezoneError",
    "ParsedComponents",
    "TemporalCandidate",
    # Signals
    "extract_attendees",
    "extract_location",
    "detect_priority",
    # Classification
    "KindClassifier",
    "Classification",
    "compute_confidence",
    # Assembly
    "CaptureBuilder",
    "parse_capture",
    # Enrichment
    "Enrichment",
    "merge_enrichment",
    # Export and history
    "capture_to_ics",
    "ics_filename",
    "HistoryItem",
    "find_duplicate",
    "history_item_for",
    # Providers
    "CreateResult",
    "ProviderKind",
    "route_provider",
]
