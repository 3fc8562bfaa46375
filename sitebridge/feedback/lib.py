"""Feedback log.

Agents report friction with the tools (missing actions, confusing errors,
workarounds they had to use) through ``feedback(action:'report')``. Reports
are appended to a JSON-lines file so they survive restarts and can be
reviewed offline.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sitebridge.config import get_feedback_log_path
from sitebridge.core import get_logger
from sitebridge.errors import ValidationError

logger = get_logger("feedback")

DEFAULT_LIST_LIMIT = 20


@dataclass
class FeedbackEntry:
    """One feedback report.

    Attributes:
        timestamp: ISO-8601 UTC time of the report.
        description: What went wrong or what is missing.
        context: What the agent was trying to do.
        workaround: How the agent worked around it, if at all.
    """

    timestamp: str
    description: str
    context: str | None = None
    workaround: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class FeedbackLog:
    """Append-only JSON-lines feedback store.

    Example:
        >>> log = FeedbackLog(tmp_path / "feedback.jsonl")
        >>> log.report("style.set rejects shorthand grid values")
        >>> len(log.list())
        1
    """

    def __init__(self, path: Path | str | None = None):
        self.path = get_feedback_log_path(path)

    def report(
        self,
        description: str,
        context: str | None = None,
        workaround: str | None = None,
    ) -> FeedbackEntry:
        """Append a report.

        Raises:
            ValidationError: Empty description.
        """
        if not description or not description.strip():
            raise ValidationError("description must not be empty")
        entry = FeedbackEntry(
            timestamp=datetime.now(UTC).isoformat(),
            description=description.strip(),
            context=context,
            workaround=workaround,
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict()) + "\n")
        logger.info(f"Feedback recorded in {self.path}")
        return entry

    def list(self, limit: int = DEFAULT_LIST_LIMIT) -> list[FeedbackEntry]:
        """Return the most recent entries, oldest first."""
        if limit < 1:
            raise ValidationError("limit must be >= 1")
        if not self.path.exists():
            return []
        entries: list[FeedbackEntry] = []
        with open(self.path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f):
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError as e:
                    logger.warning(f"Invalid JSON at line {line_num} of {self.path}: {e}")
                    continue
                entries.append(
                    FeedbackEntry(
                        timestamp=data.get("timestamp", ""),
                        description=data.get("description", ""),
                        context=data.get("context"),
                        workaround=data.get("workaround"),
                    )
                )
        return entries[-limit:]


__all__ = ["FeedbackEntry", "FeedbackLog", "DEFAULT_LIST_LIMIT"]
