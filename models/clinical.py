"""Medical records, prescriptions and scan attachments."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Set


class RecordStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class PrescriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"


@dataclass
class MedicalRecord:
    record_id: str
    patient_id: str
    clinician_id: str
    diagnosis: str
    prescription: str
    treatment: str = ""
    notes: str = ""
    record_date: date = field(default_factory=date.today)
    created_at: datetime = field(default_factory=datetime.now)
    status: RecordStatus = RecordStatus.ACTIVE
    symptoms: Set[str] = field(default_factory=set)
    medications: Set[str] = field(default_factory=set)
    follow_up_required: bool = False
    follow_up_date: Optional[date] = None

    def is_complete(self) -> bool:
        return bool(self.diagnosis.strip()) and bool(self.prescription.strip())

    def update(
        self,
        diagnosis: str = "",
        prescription: str = "",
        treatment: str = "",
        notes: str = "",
    ) -> bool:
        """Overwrite the non-empty fields given. Archived records are read-only."""

        if self.status is RecordStatus.ARCHIVED:
            return False
        if diagnosis:
            self.diagnosis = diagnosis
        if prescription:
            self.prescription = prescription
        if treatment:
            self.treatment = treatment
        if notes:
            self.notes = notes
        return True

    def archive(self) -> bool:
        if self.status is RecordStatus.ARCHIVED:
            return False
        self.status = RecordStatus.ARCHIVED
        return True

    def add_symptom(self, symptom: str) -> None:
        self.symptoms.add(symptom)

    def remove_symptom(self, symptom: str) -> None:
        self.symptoms.discard(symptom)

    def add_medication(self, medication: str) -> None:
        self.medications.add(medication)

    def remove_medication(self, medication: str) -> None:
        self.medications.discard(medication)

    def set_follow_up(self, required: bool, follow_up_date: Optional[date] = None) -> None:
        self.follow_up_required = required
        self.follow_up_date = follow_up_date if required else None

    def is_follow_up_due(self, today: date) -> bool:
        if not self.follow_up_required or self.follow_up_date is None:
            return False
        return today >= self.follow_up_date


@dataclass
class Medication:
    """A line item of a prescription. It has no identity of its own."""

    name: str
    dosage: str
    frequency: str
    duration: str
    instructions: str = ""

    def __str__(self) -> str:
        text = f"{self.name} - {self.dosage} {self.frequency} for {self.duration}"
        if self.instructions:
            text = f"{text} ({self.instructions})"
        return text


@dataclass
class Prescription:
    prescription_id: str
    patient_id: str
    clinician_id: str
    valid_until: Optional[date]
    refills_remaining: int = 0
    prescription_date: date = field(default_factory=date.today)
    created_at: datetime = field(default_factory=datetime.now)
    medications: List[Medication] = field(default_factory=list)
    instructions: str = ""
    status: PrescriptionStatus = PrescriptionStatus.ACTIVE
    notes: str = ""

    def add_medication(self, medication: Medication) -> None:
        self.medications.append(medication)

    def remove_medication(self, name: str) -> bool:
        for index, medication in enumerate(self.medications):
            if medication.name == name:
                del self.medications[index]
                return True
        return False

    def update_instructions(self, instructions: str) -> None:
        self.instructions = instructions

    def add_note(self, note: str) -> None:
        if not note:
            return
        self.notes = f"{self.notes}\n{note}" if self.notes else note

    def is_expired(self, today: date) -> bool:
        return self.valid_until is not None and today > self.valid_until

    def is_valid(self, today: date) -> bool:
        return self.status is PrescriptionStatus.ACTIVE and not self.is_expired(today)

    def process_refill(self, today: date) -> bool:
        """Consume one refill. Returns ``False`` without changes when not allowed."""

        if self.refills_remaining <= 0:
            return False
        if self.is_expired(today):
            return False
        if self.status is not PrescriptionStatus.ACTIVE:
            return False
        self.refills_remaining -= 1
        return True

    def cancel(self) -> bool:
        if self.status is PrescriptionStatus.CANCELLED:
            return False
        self.status = PrescriptionStatus.CANCELLED
        return True


@dataclass
class Scan:
    """Metadata for an uploaded file attached to a patient."""

    scan_id: str
    patient_id: str
    appointment_id: Optional[str]
    file_path: str
    file_type: str
    size_bytes: int
    uploaded_at: datetime = field(default_factory=datetime.now)
    description: str = ""


__all__ = [
    "MedicalRecord",
    "Medication",
    "Prescription",
    "PrescriptionStatus",
    "RecordStatus",
    "Scan",
]
