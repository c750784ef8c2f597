"""Feedback models."""

from enum import Enum


class FeedbackType(str, Enum):
    """Feedback cadence: on one day's work or on a whole week."""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
