"""Account entities for administrators, clinicians and patients.

An :class:`Account` carries the fields shared by every user and exactly one
role payload. The payload type decides the role, so the role cannot drift
away from the data that belongs to it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Set, Union

DEFAULT_ADMIN_PERMISSIONS = (
    "MANAGE_CLINICIANS",
    "MANAGE_PATIENTS",
    "VIEW_ALL_APPOINTMENTS",
    "GENERATE_REPORTS",
    "SYSTEM_ADMINISTRATION",
)

DEFAULT_TIME_SLOTS = (
    "09:00-10:00",
    "10:00-11:00",
    "11:00-12:00",
    "14:00-15:00",
    "15:00-16:00",
    "16:00-17:00",
)


class Role(str, Enum):
    ADMINISTRATOR = "ADMIN"
    CLINICIAN = "CLINICIAN"
    PATIENT = "PATIENT"


@dataclass
class AdministratorProfile:
    admin_id: str
    permissions: Set[str] = field(default_factory=lambda: set(DEFAULT_ADMIN_PERMISSIONS))

    def grant(self, permission: str) -> None:
        self.permissions.add(permission)

    def revoke(self, permission: str) -> None:
        self.permissions.discard(permission)

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


@dataclass
class ClinicianProfile:
    clinician_id: str
    specialization: str
    license_number: str
    experience_years: int = 0
    qualifications: Set[str] = field(default_factory=set)
    available_time_slots: List[str] = field(default_factory=lambda: list(DEFAULT_TIME_SLOTS))

    def add_qualification(self, qualification: str) -> None:
        self.qualifications.add(qualification)

    def remove_qualification(self, qualification: str) -> None:
        self.qualifications.discard(qualification)

    def add_time_slot(self, time_slot: str) -> None:
        if time_slot not in self.available_time_slots:
            self.available_time_slots.append(time_slot)

    def remove_time_slot(self, time_slot: str) -> None:
        if time_slot in self.available_time_slots:
            self.available_time_slots.remove(time_slot)

    def is_available_at(self, time_slot: str) -> bool:
        return time_slot in self.available_time_slots


@dataclass
class PatientProfile:
    patient_id: str
    age: int
    gender: str
    blood_type: str
    emergency_contact: str
    medical_history: str = ""
    allergies: Set[str] = field(default_factory=set)
    current_medications: Set[str] = field(default_factory=set)
    registration_date: date = field(default_factory=date.today)

    def add_allergy(self, allergy: str) -> None:
        self.allergies.add(allergy)

    def remove_allergy(self, allergy: str) -> None:
        self.allergies.discard(allergy)

    def add_medication(self, medication: str) -> None:
        self.current_medications.add(medication)

    def remove_medication(self, medication: str) -> None:
        self.current_medications.discard(medication)

    def append_medical_history(self, entry: str) -> None:
        """Append ``entry`` to the history log; earlier entries are never rewritten."""

        if not entry:
            return
        if self.medical_history:
            self.medical_history = f"{self.medical_history}\n{entry}"
        else:
            self.medical_history = entry


Profile = Union[AdministratorProfile, ClinicianProfile, PatientProfile]


@dataclass
class Account:
    """A user of the system together with its role payload."""

    username: str
    password: str
    full_name: str
    email: str
    phone: str
    address: str
    profile: Profile
    active: bool = True

    @property
    def role(self) -> Role:
        match self.profile:
            case AdministratorProfile():
                return Role.ADMINISTRATOR
            case ClinicianProfile():
                return Role.CLINICIAN
            case PatientProfile():
                return Role.PATIENT
        raise TypeError(f"Unsupported profile type: {type(self.profile).__name__}")

    @property
    def role_id(self) -> str:
        """The role-specific identifier (``ADM001``, ``DOC001``, ``PAT001`` ...)."""

        match self.profile:
            case AdministratorProfile(admin_id=admin_id):
                return admin_id
            case ClinicianProfile(clinician_id=clinician_id):
                return clinician_id
            case PatientProfile(patient_id=patient_id):
                return patient_id
        raise TypeError(f"Unsupported profile type: {type(self.profile).__name__}")

    def validate_credentials(self, username: str, password: str) -> bool:
        return self.username == username and self.password == password

    def __str__(self) -> str:
        return (
            f"User: {self.full_name} | Role: {self.role.value} | "
            f"Email: {self.email} | Contact: {self.phone}"
        )


__all__ = [
    "DEFAULT_ADMIN_PERMISSIONS",
    "DEFAULT_TIME_SLOTS",
    "Account",
    "AdministratorProfile",
    "ClinicianProfile",
    "PatientProfile",
    "Profile",
    "Role",
]
