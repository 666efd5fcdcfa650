"""Event-vs-task classification.

Pure logic - no I/O. The decision is a fixed, ordered cascade; keep the
branch order intact, since ties are resolved by position.
"""

import re
from dataclasses import dataclass

from .models import EVENT, TASK, CaptureKind

EVENT_KEYWORDS: tuple[str, ...] = (
    "meet",
    "meeting",
    "call",
    "sync",
    "standup",
    "retro",
    "review",
    "demo",
    "interview",
    "lecture",
    "class",
    "webinar",
    "workshop",
    "room",
    "zoom",
    "google meet",
    "teams",
)

# "review" is in both tables and scores for both.
TASK_KEYWORDS: tuple[str, ...] = (
    "submit",
    "finish",
    "complete",
    "send",
    "write",
    "todo",
    "follow up",
    "review",
    "ship",
    "publish",
    "draft",
    "prepare",
    "remind",
    "pay",
)

CLOCK_TIME_PATTERN = re.compile(r"\b\d{1,2}[:.\-]?\d{0,2}\s?(am|pm)?\b", re.IGNORECASE)
NAMED_TIME_PATTERN = re.compile(r"\bnoon\b|\bmidnight\b", re.IGNORECASE)


def score_text(text: str, keywords: tuple[str, ...]) -> int:
    """Count keywords that occur as substrings of text."""
    lower = text.lower()
    return sum(1 for keyword in keywords if keyword in lower)


def has_explicit_time(text: str) -> bool:
    """True when text states a clock time or noon/midnight."""
    return bool(CLOCK_TIME_PATTERN.search(text) or NAMED_TIME_PATTERN.search(text))


@dataclass(frozen=True)
class Classification:
    """Outcome of a classification, with the signals that drove it."""

    kind: CaptureKind
    event_score: int
    task_score: int
    explicit_time: bool


class KindClassifier:
    """Decides event or task from keyword scores and temporal signals."""

    def __init__(
        self,
        event_keywords: tuple[str, ...] = EVENT_KEYWORDS,
        task_keywords: tuple[str, ...] = TASK_KEYWORDS,
    ):
        self.event_keywords = tuple(event_keywords)
        self.task_keywords = tuple(task_keywords)

    def scores(self, text: str) -> tuple[int, int]:
        """(event_score, task_score) for text."""
        return score_text(text, self.event_keywords), score_text(text, self.task_keywords)

    def classify(
        self,
        text: str,
        candidate_count: int,
        forced_kind: CaptureKind | None = None,
    ) -> Classification:
        event_score, task_score = self.scores(text)
        explicit_time = has_explicit_time(text)
        has_temporal = candidate_count > 0

        if forced_kind:
            kind = forced_kind
        elif has_temporal and (explicit_time or event_score > task_score):
            kind = EVENT
        elif not has_temporal and task_score >= event_score:
            kind = TASK
        elif task_score > event_score:
            kind = TASK
        else:
            kind = EVENT if has_temporal else TASK

        return Classification(
            kind=kind,
            event_score=event_score,
            task_score=task_score,
            explicit_time=explicit_time,
        )
