"""Starter fixture loaded on first initialisation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import List

from .accounts import Account, AdministratorProfile, ClinicianProfile, PatientProfile
from .appointments import Appointment, AppointmentStatus
from .clinical import MedicalRecord, Medication, Prescription


@dataclass
class SeedData:
    accounts: List[Account] = field(default_factory=list)
    appointments: List[Appointment] = field(default_factory=list)
    medical_records: List[MedicalRecord] = field(default_factory=list)
    prescriptions: List[Prescription] = field(default_factory=list)


def _clinician(username: str, full_name: str, suffix: str, clinician_id: str,
               specialization: str, license_number: str, years: int) -> Account:
    return Account(
        username=username,
        password="Doctor123!",
        full_name=full_name,
        email=f"{username}@mediconnect.com",
        phone=f"098765432{suffix}",
        address=f"45{suffix} Doctor Ave",
        profile=ClinicianProfile(
            clinician_id=clinician_id,
            specialization=specialization,
            license_number=license_number,
            experience_years=years,
        ),
    )


def build_seed_data(today: date) -> SeedData:
    """Build a fresh copy of the fixture with dates relative to ``today``."""

    admin = Account(
        username="admin",
        password="Admin123!",
        full_name="System Administrator",
        email="admin@mediconnect.com",
        phone="1234567890",
        address="123 Admin St",
        profile=AdministratorProfile(admin_id="ADM001"),
    )
    patient = Account(
        username="patient",
        password="Patient123!",
        full_name="Jane Doe",
        email="patient@mediconnect.com",
        phone="1122334455",
        address="789 Patient Blvd",
        profile=PatientProfile(
            patient_id="PAT001",
            age=30,
            gender="Female",
            blood_type="A+",
            emergency_contact="9998887777",
            registration_date=today,
        ),
    )
    accounts = [
        admin,
        _clinician("doctor", "Dr. John Smith", "1", "DOC001", "General Medicine", "LIC001", 10),
        _clinician("doctor2", "Dr. Sarah Johnson", "2", "DOC002", "Cardiology", "LIC002", 8),
        _clinician("doctor3", "Dr. Michael Brown", "3", "DOC003", "Dermatology", "LIC003", 12),
        patient,
    ]

    appointments = [
        Appointment("APT001", "DOC001", "PAT001", today + timedelta(days=1), time(9, 0),
                    "09:00-10:00", "Regular checkup", created_date=today),
        Appointment("APT002", "DOC002", "PAT001", today + timedelta(days=3), time(14, 0),
                    "14:00-15:00", "Follow-up consultation", created_date=today),
        Appointment("APT003", "DOC003", "PAT001", today + timedelta(days=2), time(10, 0),
                    "10:00-11:00", "Dermatology consultation", created_date=today),
    ]
    for appointment in appointments:
        appointment.status = AppointmentStatus.SCHEDULED

    medical_records = [
        MedicalRecord("REC001", "PAT001", "DOC001", "Hypertension",
                      "Lisinopril 10mg daily", record_date=today),
        MedicalRecord("REC002", "PAT001", "DOC001", "Diabetes Type 2",
                      "Metformin 500mg twice daily", record_date=today),
    ]

    prescription = Prescription(
        "PRES001",
        "PAT001",
        "DOC001",
        valid_until=today + timedelta(days=90),
        refills_remaining=2,
        prescription_date=today,
        instructions="Take as directed",
    )
    prescription.add_medication(Medication("Lisinopril", "10mg", "Once daily", "30 days", "Take with food"))
    prescription.add_medication(Medication("Metformin", "500mg", "Twice daily", "30 days", "Take with meals"))

    return SeedData(
        accounts=accounts,
        appointments=appointments,
        medical_records=medical_records,
        prescriptions=[prescription],
    )


__all__ = ["SeedData", "build_seed_data"]
