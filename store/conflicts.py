"""Scheduling conflict detection."""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from models.appointments import Appointment


def find_conflicts(
    appointments: Iterable[Appointment],
    clinician_id: str,
    appointment_date: date,
    time_slot: str,
    *,
    ignore_id: Optional[str] = None,
) -> List[Appointment]:
    """Return the non-cancelled appointments holding the given clinician slot."""

    return [
        appointment
        for appointment in appointments
        if appointment.clinician_id == clinician_id
        and appointment.date == appointment_date
        and appointment.time_slot == time_slot
        and appointment.holds_slot
        and appointment.appointment_id != ignore_id
    ]


def is_slot_free(
    appointments: Iterable[Appointment],
    clinician_id: str,
    appointment_date: date,
    time_slot: str,
    *,
    ignore_id: Optional[str] = None,
) -> bool:
    """Advisory check; the repository repeats it under its lock before writing."""

    return not find_conflicts(
        appointments,
        clinician_id,
        appointment_date,
        time_slot,
        ignore_id=ignore_id,
    )


__all__ = ["find_conflicts", "is_slot_free"]
