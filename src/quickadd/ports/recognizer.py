"""Date/time recognizer interface."""

from datetime import datetime
from typing import Protocol

from quickadd.core.temporal import TemporalCandidate


class DateRecognizer(Protocol):
    """Interface for natural-language date/time recognition."""

    def recognize(self, text: str, reference: datetime) -> list[TemporalCandidate]:
        """Ranked candidates found in text, most likely first. Empty if none."""
        ...
