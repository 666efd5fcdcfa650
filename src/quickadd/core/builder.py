"""Capture assembly - turns a selection into a ParseResult.

Pure orchestration over the extractors, classifier, resolver and scorer.
The only I/O-shaped dependency is the date recognizer, passed in by the
caller.
"""

import logging
import uuid
from dataclasses import replace
from typing import TYPE_CHECKING

from .classifier import Classification, KindClassifier
from .confidence import compute_confidence
from .models import (
    EVENT,
    TASK,
    CaptureSource,
    EventCapture,
    ParseRequest,
    ParseResult,
    QuickAddDefaults,
    TaskCapture,
    infer_title,
)
from .signals import DEFAULT_PATTERNS, SignalPatterns, detect_priority, extract_attendees, extract_location
from .temporal import (
    TemporalCandidate,
    at_due_time,
    default_task_due,
    is_all_day,
    reference_now,
    resolve_span,
    resolve_timezone,
    to_zone,
)

if TYPE_CHECKING:
    from quickadd.ports.recognizer import DateRecognizer

logger = logging.getLogger(__name__)

MAX_ALTERNATIVES = 2
WEEKLY_RECURRENCE = "RRULE:FREQ=WEEKLY"
MULTIPLE_DATES_WARNING = "Multiple date interpretations detected"
NO_DATE_WARNING = "Could not detect a date/time. Captured as task."


def build_notes(page_title: str, url: str, quote: str) -> str:
    return f"From: {page_title} — {url}\nQuote: “{quote.strip()}”"


def new_capture_id() -> str:
    return str(uuid.uuid4())


class CaptureBuilder:
    """
    Builds a primary capture and up to two alternatives from a selection.

    Holds only configuration; every call to parse() is independent.
    """

    def __init__(
        self,
        recognizer: "DateRecognizer",
        defaults: QuickAddDefaults | None = None,
        classifier: KindClassifier | None = None,
        patterns: SignalPatterns = DEFAULT_PATTERNS,
    ):
        self.recognizer = recognizer
        self.defaults = defaults or QuickAddDefaults()
        self.classifier = classifier or KindClassifier()
        self.patterns = patterns

    def parse(self, request: ParseRequest) -> ParseResult:
        """Parse a request. Raises InvalidTimezoneError for a bad timezone."""
        text = request.text.strip()
        tz_name = request.timezone or self.defaults.timezone
        tz = resolve_timezone(tz_name)
        now = reference_now(tz, request.now)

        notes = build_notes(request.page_title, request.url, text)
        attendees = extract_attendees(text, self.patterns)
        location = extract_location(text, self.patterns)

        candidates = list(self.recognizer.recognize(text, now)) if text else []
        classification = self.classifier.classify(text, len(candidates), request.forced_kind)
        logger.debug(
            f"Classified {classification.kind} "
            f"(event={classification.event_score}, task={classification.task_score}, "
            f"candidates={len(candidates)})"
        )

        warnings: list[str] = []
        if len(candidates) > 1:
            warnings.append(MULTIPLE_DATES_WARNING)

        common = dict(
            title=infer_title(text),
            notes=notes,
            location=location,
            attendees=attendees,
            source=CaptureSource(url=request.url, title=request.page_title),
            tz=tz_name,
            reminder_minutes=self.defaults.reminder_minutes,
        )

        if classification.kind == EVENT and candidates:
            capture, alternatives = self._build_event(common, candidates, classification, tz)
        else:
            if classification.kind == EVENT:
                warnings.append(NO_DATE_WARNING)
            capture, alternatives = self._build_task(common, text, candidates, classification, tz, now)

        return ParseResult(
            capture=capture,
            alternatives=tuple(alternatives) or None,
            warnings=tuple(warnings) or None,
            diagnostics={
                "temporal_candidates": len(candidates),
                "chosen_kind": classification.kind,
            },
        )

    def _build_event(
        self,
        common: dict,
        candidates: list[TemporalCandidate],
        classification: Classification,
        tz,
    ) -> tuple[EventCapture, list[EventCapture]]:
        span = resolve_span(candidates[0], tz, self.defaults.duration_minutes)
        capture = EventCapture(
            id=new_capture_id(),
            start=span.start,
            end=span.end,
            all_day=span.all_day,
            confidence=compute_confidence(
                classification.event_score,
                classification.task_score,
                EVENT,
                has_duration=True,
                has_date=True,
            ),
            **common,
        )

        alternatives = []
        for candidate in candidates[1 : MAX_ALTERNATIVES + 1]:
            alt_span = resolve_span(candidate, tz, self.defaults.duration_minutes)
            alternatives.append(
                replace(capture, id=new_capture_id(), start=alt_span.start, end=alt_span.end)
            )
        return capture, alternatives

    def _build_task(
        self,
        common: dict,
        text: str,
        candidates: list[TemporalCandidate],
        classification: Classification,
        tz,
        now,
    ) -> tuple[TaskCapture, list[TaskCapture]]:
        if candidates:
            due = self._due_for(candidates[0], tz)
        else:
            due = default_task_due(now, self.defaults.task_due_hour, self.defaults.task_due_minute)

        recurrence = None
        if candidates and "every" in candidates[0].text.lower():
            recurrence = WEEKLY_RECURRENCE

        capture = TaskCapture(
            id=new_capture_id(),
            due=due,
            priority=detect_priority(text, self.patterns),
            recurrence=recurrence,
            confidence=compute_confidence(
                classification.event_score,
                classification.task_score,
                TASK,
                has_duration=False,
                has_date=bool(candidates),
            ),
            **common,
        )

        alternatives = [
            replace(capture, id=new_capture_id(), due=self._due_for(candidate, tz))
            for candidate in candidates[1 : MAX_ALTERNATIVES + 1]
        ]
        return capture, alternatives

    def _due_for(self, candidate: TemporalCandidate, tz):
        due = to_zone(candidate.start, tz)
        if is_all_day(candidate.start):
            due = at_due_time(due, self.defaults.task_due_hour, self.defaults.task_due_minute)
        return due


def parse_capture(
    request: ParseRequest,
    recognizer: "DateRecognizer",
    defaults: QuickAddDefaults | None = None,
) -> ParseResult:
    """
    Parse a selection into a ParseResult.

    Convenience wrapper around CaptureBuilder with the stock tables.
    """
    return CaptureBuilder(recognizer, defaults).parse(request)
