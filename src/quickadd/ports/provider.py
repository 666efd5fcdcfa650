"""Capture submission interface."""

from typing import Protocol

from quickadd.core.models import Capture
from quickadd.core.providers import CreateResult


class CaptureProvider(Protocol):
    """Interface for sending a capture to a calendar or task backend."""

    def create(self, capture: Capture) -> CreateResult:
        """Submit a capture. Failures are reported in the result, not raised."""
        ...
