"""Domain entities for the MediConnect record keeper."""

from .accounts import (
    DEFAULT_ADMIN_PERMISSIONS,
    DEFAULT_TIME_SLOTS,
    Account,
    AdministratorProfile,
    ClinicianProfile,
    PatientProfile,
    Profile,
    Role,
)
from .appointments import Appointment, AppointmentStatus, SlotKey, slot_start
from .clinical import (
    MedicalRecord,
    Medication,
    Prescription,
    PrescriptionStatus,
    RecordStatus,
    Scan,
)
from .seed import SeedData, build_seed_data

__all__ = [
    "DEFAULT_ADMIN_PERMISSIONS",
    "DEFAULT_TIME_SLOTS",
    "Account",
    "AdministratorProfile",
    "Appointment",
    "AppointmentStatus",
    "ClinicianProfile",
    "MedicalRecord",
    "Medication",
    "PatientProfile",
    "Prescription",
    "PrescriptionStatus",
    "Profile",
    "RecordStatus",
    "Role",
    "Scan",
    "SeedData",
    "SlotKey",
    "build_seed_data",
    "slot_start",
]
