"""Conversation states for Telegram bot."""

from enum import IntEnum, auto


class CaptureStates(IntEnum):
    """States for the capture confirmation conversation."""

    REVIEWING = auto()
    EDIT_VALUE = auto()
