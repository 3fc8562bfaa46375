"""Readiness, per-document locking and editor event wiring."""

from .lib import Bridge, DocumentGuard, ReadinessSignal

__all__ = ["Bridge", "DocumentGuard", "ReadinessSignal"]
