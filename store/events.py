"""Event sinks receiving domain events from the repository and lifecycle.

Domain code never prints. It emits a named event with keyword details and the
sink decides where it goes: the logging system, a JSON journal on disk, or
several of those at once.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Protocol

logger = logging.getLogger(__name__)

WARNING_EVENTS = frozenset(
    {
        "store.unavailable",
        "store.write_failed",
        "store.load_failed",
        "appointment.load_skipped",
        "clinician.removed",
    }
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat().replace("+00:00", "Z")


class EventSink(Protocol):
    """Anything that accepts domain events."""

    def emit(self, event: str, **details: Any) -> None:
        """Record ``event`` with its structured ``details``."""


class LoggingEventSink:
    """Forwards events to a :mod:`logging` logger."""

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logging.getLogger("mediconnect.events")

    def emit(self, event: str, **details: Any) -> None:
        level = logging.WARNING if event in WARNING_EVENTS else logging.INFO
        if details:
            rendered = " ".join(f"{key}={value}" for key, value in sorted(details.items()))
            self._logger.log(level, "%s %s", event, rendered)
        else:
            self._logger.log(level, "%s", event)


class EventJournal:
    """Appends events to a JSON list on disk."""

    def __init__(self, journal_path: Path | str) -> None:
        self._journal_path = Path(journal_path)
        self._lock = threading.Lock()
        self._journal_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._journal_path

    def emit(self, event: str, **details: Any) -> None:
        entry: Dict[str, Any] = {
            "event": event,
            "recorded_at": _format_timestamp(_utc_now()),
        }
        if details:
            entry["details"] = details

        with self._lock:
            history = self._read_history()
            history.append(entry)
            serialized = json.dumps(history, indent=2, default=str)
            self._journal_path.write_text(f"{serialized}\n", encoding="utf-8")

    def entries(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self._read_history()

    def _read_history(self) -> List[Dict[str, Any]]:
        if not self._journal_path.exists():
            return []
        raw_content = self._journal_path.read_text(encoding="utf-8").strip()
        if not raw_content:
            return []
        try:
            data = json.loads(raw_content)
        except json.JSONDecodeError:
            logger.warning("Event journal %s is corrupted; starting a new one", self._journal_path)
            return []
        if not isinstance(data, list):
            logger.warning("Event journal %s is not a JSON list; starting a new one", self._journal_path)
            return []
        return data


class CompositeEventSink:
    """Fans every event out to several sinks."""

    def __init__(self, sinks: Iterable[EventSink]) -> None:
        self._sinks = list(sinks)

    def emit(self, event: str, **details: Any) -> None:
        for sink in self._sinks:
            try:
                sink.emit(event, **details)
            except Exception:  # noqa: BLE001 - one broken sink must not silence the others
                logger.exception("Event sink %r failed for %s", sink, event)


__all__ = [
    "CompositeEventSink",
    "EventJournal",
    "EventSink",
    "LoggingEventSink",
]
