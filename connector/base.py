"""Interfaces shared by the durable-store connectors."""

from __future__ import annotations

from datetime import date
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Tuple

from models import (
    Account,
    Appointment,
    MedicalRecord,
    Prescription,
    Scan,
)

Statement = Tuple[str, Optional[Mapping[str, Any]]]


class StoreClientError(RuntimeError):
    """Base exception for durable-store client errors."""


class StoreAuthError(StoreClientError):
    """Raised when the store rejects or cannot issue credentials."""


class StoreAPIError(StoreClientError):
    """Raised when a statement fails or the store answers with an error."""


class SQLClientProtocol(Protocol):
    """Minimal interface required from a SQL client."""

    def fetch_all(self, query: str, params: Optional[Mapping[str, Any]] = None) -> Sequence[Mapping[str, Any]]:
        """Run a read-only SQL query and return its rows as mappings."""

    def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int:
        """Execute a mutating statement and return the number of affected rows."""

    def execute_many(self, statements: Sequence[Statement]) -> None:
        """Execute several statements inside one transaction."""

    def ping(self) -> bool:
        """Return ``True`` when the store answers."""


class PersistenceAdapter(Protocol):
    """Durable mirror of the entity repository.

    Writes return ``False`` and counts return ``None`` when the store could not
    serve the call; listings return an empty list. Implementations may still
    raise, and callers must tolerate that too.
    """

    def ping(self) -> bool: ...

    def save_account(self, account: Account) -> bool: ...

    def delete_account(self, username: str) -> bool: ...

    def save_appointment(self, appointment: Appointment) -> bool: ...

    def save_medical_record(self, record: MedicalRecord) -> bool: ...

    def save_prescription(self, prescription: Prescription) -> bool: ...

    def save_scan(self, scan: Scan) -> bool: ...

    def get_all_administrators(self) -> List[Account]: ...

    def get_all_clinicians(self) -> List[Account]: ...

    def get_all_patients(self) -> List[Account]: ...

    def get_all_appointments(self) -> List[Appointment]: ...

    def get_all_medical_records(self) -> List[MedicalRecord]: ...

    def get_all_prescriptions(self) -> List[Prescription]: ...

    def get_all_scans(self) -> List[Scan]: ...

    def get_scans_by_patient(self, patient_id: str) -> List[Scan]: ...

    def get_scans_by_appointment(self, appointment_id: str) -> List[Scan]: ...

    def count_accounts(self) -> Optional[int]: ...

    def count_clinicians(self) -> Optional[int]: ...

    def count_patients(self) -> Optional[int]: ...

    def count_appointments(self) -> Optional[int]: ...

    def count_appointments_by_status(self, status: str) -> Optional[int]: ...

    def count_upcoming_appointments_by_patient(self, patient_id: str, today: date) -> Optional[int]: ...

    def count_appointments_by_patient(self, patient_id: str) -> Optional[int]: ...

    def count_medical_records_by_patient(self, patient_id: str) -> Optional[int]: ...

    def count_prescriptions_by_patient(self, patient_id: str) -> Optional[int]: ...

    def seed_defaults_if_missing(self) -> bool: ...


__all__ = [
    "PersistenceAdapter",
    "SQLClientProtocol",
    "Statement",
    "StoreAPIError",
    "StoreAuthError",
    "StoreClientError",
]
