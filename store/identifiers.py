"""Collision-free identifier generation."""

from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Callable, Container, Dict, Sized


class IdKind(str, Enum):
    APPOINTMENT = "APT"
    MEDICAL_RECORD = "REC"
    PRESCRIPTION = "PRES"
    SCAN = "SCAN"
    ADMINISTRATOR = "ADM"
    CLINICIAN = "DOC"
    PATIENT = "PAT"

    @property
    def prefix(self) -> str:
        return self.value


def _milliseconds() -> int:
    return time.time_ns() // 1_000_000


class IdentifierGenerator:
    """Issues identifiers that are unique per kind for the life of the generator.

    Sequential kinds start probing at ``len(existing) + 1`` and step forward
    past anything already present in ``existing``. Numbers at or below the
    highest one issued are never offered again, so only a high-water mark per
    kind is kept. Scan ids are derived from a millisecond clock that is forced
    to be strictly increasing.
    """

    def __init__(self, clock: Callable[[], int] = _milliseconds) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._high_water: Dict[IdKind, int] = {}
        self._last_scan_token = 0

    def next_id(self, kind: IdKind, existing: Container[str]) -> str:
        if kind is IdKind.SCAN:
            return self._next_scan_id()

        with self._lock:
            seed = len(existing) + 1 if isinstance(existing, Sized) else 1
            counter = max(seed, self._high_water.get(kind, 0) + 1)
            while True:
                candidate = f"{kind.prefix}{counter:03d}"
                if candidate not in existing:
                    self._high_water[kind] = counter
                    return candidate
                counter += 1

    def _next_scan_id(self) -> str:
        with self._lock:
            token = max(self._clock(), self._last_scan_token + 1)
            self._last_scan_token = token
            return f"{IdKind.SCAN.prefix}{token}"

    def reset(self) -> None:
        with self._lock:
            self._high_water.clear()


__all__ = ["IdKind", "IdentifierGenerator"]
