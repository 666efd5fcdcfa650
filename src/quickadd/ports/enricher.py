"""Optional enrichment interface."""

from typing import Protocol

from quickadd.core.enrichment import Enrichment
from quickadd.core.models import ParseRequest


class Enricher(Protocol):
    """Interface for best-effort field suggestions from an external model."""

    def enhance(self, request: ParseRequest) -> Enrichment | None:
        """Suggested fields, or None when nothing useful came back."""
        ...
