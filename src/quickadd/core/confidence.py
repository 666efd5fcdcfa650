"""Confidence scoring - a fixed formula, no learned component."""

from .models import EVENT, TASK, CaptureKind

BASE_CONFIDENCE = 0.4
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.98


def clamp_confidence(value: float) -> float:
    return max(MIN_CONFIDENCE, min(value, MAX_CONFIDENCE))


def compute_confidence(
    event_score: int,
    task_score: int,
    kind: CaptureKind,
    has_duration: bool,
    has_date: bool,
) -> float:
    """
    Score how sure the parse is.

    0.40 base, +0.05 per keyword hit (at most 3), +0.20 for an event with a
    time window, +0.10 for a task without one, +0.15 when any date matched.
    Clamped to [0.10, 0.98].
    """
    confidence = BASE_CONFIDENCE
    confidence += min(event_score + task_score, 3) * 0.05
    if kind == EVENT and has_duration:
        confidence += 0.2
    if kind == TASK and not has_duration:
        confidence += 0.1
    if has_date:
        confidence += 0.15
    return clamp_confidence(confidence)
