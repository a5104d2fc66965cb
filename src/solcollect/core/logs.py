"""Progress log for workflow runs.

Workflows record one entry per observable step (funding, uploads, ledger
submission). The CLI subscribes to render entries as they happen; tests read
them back to check ordering.
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable, Literal

LogCategory = Literal["upload", "ledger", "wallet", "system"]
LogSeverity = Literal["info", "warning", "error"]

VALID_CATEGORIES: frozenset[str] = frozenset({"upload", "ledger", "wallet", "system"})
VALID_SEVERITIES: frozenset[str] = frozenset({"info", "warning", "error"})

_ADDRESS_PATTERN = re.compile(r"\b[1-9A-HJ-NP-Za-km-z]{32,44}\b")

Subscriber = Callable[["LogEntry"], None]


def mask_addresses(text: str) -> str:
    """Shorten base58 addresses to their first and last four characters."""
    return _ADDRESS_PATTERN.sub(lambda match: f"{match.group(0)[:4]}…{match.group(0)[-4:]}", text)


@dataclass(frozen=True, slots=True)
class LogEntry:
    timestamp: datetime
    category: LogCategory
    severity: LogSeverity
    message: str
    step: str | None = None

    def as_dict(self) -> dict[str, str]:
        data = {
            "timestamp": self.timestamp.isoformat(),
            "category": self.category,
            "severity": self.severity,
            "message": self.message,
        }
        if self.step:
            data["step"] = self.step
        return data


class LogBuffer:
    """Bounded history of workflow events with live subscribers."""

    def __init__(self, *, max_entries: int = 200, redaction_enabled: bool = False) -> None:
        self.max_entries = max(max_entries, 1)
        self.redaction_enabled = redaction_enabled
        self._entries: deque[LogEntry] = deque(maxlen=self.max_entries)
        self._subscribers: list[Subscriber] = []

    def record(self, category: str, message: str, *, severity: str = "info", step: str | None = None) -> LogEntry:
        """Append an entry and notify subscribers.

        Unknown categories fall back to ``system`` and unknown severities to
        ``info``, so a typo never drops a progress line.
        """
        entry = LogEntry(
            timestamp=datetime.now(UTC),
            category=_normalize(category, VALID_CATEGORIES, "system"),  # type: ignore[arg-type]
            severity=_normalize(severity, VALID_SEVERITIES, "info"),  # type: ignore[arg-type]
            message=mask_addresses(message) if self.redaction_enabled else message,
            step=step,
        )
        self._entries.append(entry)
        for subscriber in tuple(self._subscribers):
            subscriber(entry)
        return entry

    def recent(self, *, category: str | None = None, limit: int = 50) -> list[LogEntry]:
        if limit <= 0:
            return []
        entries = list(self._entries)
        if category is not None:
            wanted = _normalize(category, VALID_CATEGORIES, "system")
            entries = [entry for entry in entries if entry.category == wanted]
        return entries[-limit:]

    def for_step(self, step: str) -> list[LogEntry]:
        return [entry for entry in self._entries if entry.step == step]

    def latest(self) -> LogEntry | None:
        return self._entries[-1] if self._entries else None

    def subscribe(self, callback: Subscriber) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)


def _normalize(value: str, allowed: frozenset[str], fallback: str) -> str:
    lowered = value.lower()
    return lowered if lowered in allowed else fallback


__all__ = [
    "LogBuffer",
    "LogCategory",
    "LogEntry",
    "LogSeverity",
    "VALID_CATEGORIES",
    "VALID_SEVERITIES",
    "mask_addresses",
]
