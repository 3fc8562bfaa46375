"""Persistent feedback reports from tool users."""

from .lib import DEFAULT_LIST_LIMIT, FeedbackEntry, FeedbackLog

__all__ = ["FeedbackEntry", "FeedbackLog", "DEFAULT_LIST_LIMIT"]
