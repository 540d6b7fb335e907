"""Appointment agent providing scheduling operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional

from models import Appointment, AppointmentStatus, slot_start
from store import EntityRepository, InsertOutcome

from . import validation

logger = logging.getLogger(__name__)


def send_notification(recipient_id: str, message: str) -> None:
    """Stub notification sender for email/SMS reminders."""

    logger.info("Notification for %s: %s", recipient_id, message)


class BookingFailure(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    CLINICIAN_NOT_FOUND = "CLINICIAN_NOT_FOUND"
    PATIENT_NOT_FOUND = "PATIENT_NOT_FOUND"
    SLOT_NOT_OFFERED = "SLOT_NOT_OFFERED"
    SLOT_CONFLICT = "SLOT_CONFLICT"
    NOT_SAVED = "NOT_SAVED"


@dataclass(frozen=True)
class BookingResult:
    """Outcome of a booking request."""

    appointment: Optional[Appointment] = None
    failure: Optional[BookingFailure] = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.appointment is not None and self.failure is None


class AppointmentAgent:
    """Books, moves and queries appointments through the repository."""

    def __init__(self, repository: EntityRepository, *, require_future_date: bool = False) -> None:
        self._repository = repository
        self._require_future_date = require_future_date

    def book_appointment(
        self,
        clinician_id: str,
        patient_id: str,
        appointment_date: date | str,
        time_slot: str,
        reason: str,
    ) -> BookingResult:
        """Request an appointment. New bookings wait in ``PENDING`` for approval."""

        parsed_date = validation.parse_date(appointment_date)
        problems = []
        if not validation.is_not_empty(clinician_id):
            problems.append("clinician id is empty")
        if not validation.is_not_empty(patient_id):
            problems.append("patient id is empty")
        if parsed_date is None:
            problems.append("date must be YYYY-MM-DD")
        elif self._require_future_date and not validation.is_future_date(
            parsed_date, self._repository.today()
        ):
            problems.append("date is in the past")
        if not validation.is_valid_time_slot(time_slot):
            problems.append("time slot must be HH:MM-HH:MM")
        if not validation.is_valid_appointment_reason(reason):
            problems.append("reason must be 10 to 500 characters")
        if problems:
            return self._refuse(BookingFailure.INVALID_INPUT, "; ".join(problems))

        clinician_id = clinician_id.strip()
        patient_id = patient_id.strip()
        time_slot = time_slot.strip()

        clinician = self._repository.find_clinician_by_id(clinician_id)
        if clinician is None:
            return self._refuse(BookingFailure.CLINICIAN_NOT_FOUND, f"clinician {clinician_id} not found")
        patient = self._repository.find_patient_by_id(patient_id)
        if patient is None:
            return self._refuse(BookingFailure.PATIENT_NOT_FOUND, f"patient {patient_id} not found")
        if not clinician.profile.is_available_at(time_slot):
            return self._refuse(
                BookingFailure.SLOT_NOT_OFFERED,
                f"{clinician.full_name} does not work {time_slot}",
            )
        if not self._repository.is_time_slot_available(clinician_id, parsed_date, time_slot):
            return self._refuse(BookingFailure.SLOT_CONFLICT, "time slot is not available")

        appointment = Appointment(
            appointment_id=self._repository.generate_appointment_id(),
            clinician_id=clinician_id,
            patient_id=patient_id,
            date=parsed_date,
            time=slot_start(time_slot),
            time_slot=time_slot,
            reason=reason.strip(),
            created_date=self._repository.today(),
        )
        outcome = self._repository.insert_appointment(appointment)
        if outcome is InsertOutcome.SLOT_CONFLICT:
            return self._refuse(BookingFailure.SLOT_CONFLICT, "time slot was taken concurrently")
        if outcome is not InsertOutcome.INSERTED:
            return self._refuse(BookingFailure.NOT_SAVED, f"appointment not saved ({outcome.value})")

        send_notification(
            patient_id,
            f"Appointment {appointment.appointment_id} requested with {clinician.full_name} "
            f"on {parsed_date.isoformat()} at {time_slot} (pending approval)",
        )
        return BookingResult(appointment=appointment, message="appointment request created")

    @staticmethod
    def _refuse(failure: BookingFailure, message: str) -> BookingResult:
        logger.info("Booking refused (%s): %s", failure.value, message)
        return BookingResult(failure=failure, message=message)

    def cancel_appointment(self, appointment_id: str, reason: str = "") -> bool:
        if not self._repository.cancel_appointment(appointment_id):
            return False
        if reason:
            self._repository.add_appointment_note(appointment_id, f"Cancelled: {reason}")
        self._notify_patient(appointment_id, "has been cancelled")
        return True

    def approve_appointment(self, appointment_id: str) -> bool:
        if not self._repository.approve_appointment(appointment_id):
            return False
        self._notify_patient(appointment_id, "has been approved")
        return True

    def reject_appointment(self, appointment_id: str, reason: str = "") -> bool:
        if not self._repository.reject_appointment(appointment_id):
            return False
        if reason:
            self._repository.add_appointment_note(appointment_id, f"Rejected: {reason}")
        self._notify_patient(appointment_id, "has been rejected")
        return True

    def complete_appointment(self, appointment_id: str) -> bool:
        return self._repository.complete_appointment(appointment_id)

    def reschedule_appointment(self, appointment_id: str, new_date: date | str, new_time_slot: str) -> bool:
        parsed_date = validation.parse_date(new_date)
        if parsed_date is None or not validation.is_valid_time_slot(new_time_slot):
            return False
        new_time_slot = new_time_slot.strip()
        appointment = self._repository.get_appointment(appointment_id)
        if appointment is None:
            return False
        clinician = self._repository.find_clinician_by_id(appointment.clinician_id)
        if clinician is not None and not clinician.profile.is_available_at(new_time_slot):
            return False
        if not self._repository.reschedule_appointment(
            appointment_id,
            parsed_date,
            slot_start(new_time_slot),
            new_time_slot,
        ):
            return False
        self._notify_patient(
            appointment_id,
            f"has been moved to {parsed_date.isoformat()} at {new_time_slot}",
        )
        return True

    def add_notes(self, appointment_id: str, notes: str) -> bool:
        return self._repository.add_appointment_note(appointment_id, notes.strip() if notes else "")

    def _notify_patient(self, appointment_id: str, change: str) -> None:
        appointment = self._repository.get_appointment(appointment_id)
        if appointment is None:
            return
        send_notification(appointment.patient_id, f"Appointment {appointment_id} {change}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_available_time_slots(self, clinician_id: str, appointment_date: date) -> List[str]:
        clinician = self._repository.find_clinician_by_id(clinician_id)
        if clinician is None:
            return []
        return [
            slot
            for slot in clinician.profile.available_time_slots
            if self._repository.is_time_slot_available(clinician_id, appointment_date, slot)
        ]

    def get_appointments_by_status(self, status: AppointmentStatus | str) -> List[Appointment]:
        try:
            wanted = AppointmentStatus.parse(status)
        except ValueError:
            return []
        return _sorted([a for a in self._repository.get_all_appointments() if a.status is wanted])

    def get_appointments_by_date(self, appointment_date: date) -> List[Appointment]:
        return _sorted([a for a in self._repository.get_all_appointments() if a.date == appointment_date])

    def get_appointments_between(self, start: date, end: date) -> List[Appointment]:
        return _sorted([a for a in self._repository.get_all_appointments() if start <= a.date <= end])

    def get_pending_appointments_for_clinician(self, clinician_id: str) -> List[Appointment]:
        return _sorted(
            [
                a
                for a in self._repository.get_appointments_by_clinician(clinician_id)
                if a.status is AppointmentStatus.PENDING
            ]
        )

    def get_upcoming_appointments_by_clinician(self, clinician_id: str) -> List[Appointment]:
        today = self._repository.today()
        return _sorted(
            [
                a
                for a in self._repository.get_appointments_by_clinician(clinician_id)
                if a.date >= today and a.holds_slot
            ]
        )

    def get_upcoming_appointments_by_patient(self, patient_id: str) -> List[Appointment]:
        today = self._repository.today()
        return _sorted(
            [
                a
                for a in self._repository.get_appointments_by_patient(patient_id)
                if a.date >= today and a.holds_slot
            ]
        )

    def get_past_appointments_by_patient(self, patient_id: str) -> List[Appointment]:
        today = self._repository.today()
        return _sorted([a for a in self._repository.get_appointments_by_patient(patient_id) if a.is_past(today)])

    def get_appointments_for_week(self, reference: Optional[date] = None) -> List[Appointment]:
        reference = reference or self._repository.today()
        start = reference - timedelta(days=reference.weekday())
        return self.get_appointments_between(start, start + timedelta(days=6))


def _sorted(appointments: List[Appointment]) -> List[Appointment]:
    return sorted(appointments, key=lambda a: (a.date, a.time, a.appointment_id))


__all__ = [
    "AppointmentAgent",
    "BookingFailure",
    "BookingResult",
    "send_notification",
]
