"""Appointment entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Tuple


class AppointmentStatus(str, Enum):
    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    RESCHEDULED = "RESCHEDULED"

    @classmethod
    def parse(cls, value: object) -> "AppointmentStatus":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


SlotKey = Tuple[str, date, str]


def slot_start(time_slot: str) -> time:
    """Return the start time of a ``HH:MM-HH:MM`` slot label."""

    start, _, _ = time_slot.partition("-")
    return time.fromisoformat(start.strip().zfill(5))


@dataclass
class Appointment:
    """A booked or requested visit of a patient with a clinician."""

    appointment_id: str
    clinician_id: str
    patient_id: str
    date: date
    time: time
    time_slot: str
    reason: str
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: str = ""
    created_date: date = field(default_factory=date.today)

    @property
    def slot_key(self) -> SlotKey:
        return (self.clinician_id, self.date, self.time_slot)

    @property
    def holds_slot(self) -> bool:
        return self.status is not AppointmentStatus.CANCELLED

    def add_note(self, note: str) -> None:
        if not note:
            return
        self.notes = f"{self.notes}\n{note}" if self.notes else note

    def is_past(self, today: date) -> bool:
        return self.date < today

    def is_today(self, today: date) -> bool:
        return self.date == today

    def is_future(self, today: date) -> bool:
        return self.date > today

    def summary(self) -> str:
        return (
            f"ID: {self.appointment_id} | Date: {self.date.isoformat()} | "
            f"Time: {self.time_slot} | Status: {self.status.value} | Reason: {self.reason}"
        )


__all__ = ["Appointment", "AppointmentStatus", "SlotKey", "slot_start"]
