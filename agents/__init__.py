"""Service agents sitting between callers and the entity repository."""

from .accounts import AccountAgent
from .appointments import AppointmentAgent, BookingFailure, BookingResult
from .prescriptions import PrescriptionAgent
from .records import MedicalRecordAgent

__all__ = [
    "AccountAgent",
    "AppointmentAgent",
    "BookingFailure",
    "BookingResult",
    "MedicalRecordAgent",
    "PrescriptionAgent",
]
