"""Prescription agent."""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from models import Medication, Prescription
from store import EntityRepository

from . import validation

logger = logging.getLogger(__name__)


class PrescriptionAgent:
    def __init__(self, repository: EntityRepository) -> None:
        self._repository = repository

    def create_prescription(
        self,
        patient_id: str,
        clinician_id: str,
        instructions: str,
        valid_until: date,
        refills_remaining: int = 0,
        medications: Optional[List[Medication]] = None,
    ) -> Optional[Prescription]:
        """Create and store a prescription; ``None`` when the input is rejected."""

        if not validation.is_not_empty(instructions):
            logger.info("Prescription refused: instructions are empty")
            return None
        if not isinstance(valid_until, date) or valid_until < self._repository.today():
            logger.info("Prescription refused: validity must not end in the past")
            return None
        if not isinstance(refills_remaining, int) or refills_remaining < 0:
            logger.info("Prescription refused: refills must be a non-negative integer")
            return None
        if self._repository.find_patient_by_id(patient_id) is None:
            logger.info("Prescription refused: patient %s not found", patient_id)
            return None
        if self._repository.find_clinician_by_id(clinician_id) is None:
            logger.info("Prescription refused: clinician %s not found", clinician_id)
            return None

        prescription = Prescription(
            prescription_id=self._repository.generate_prescription_id(),
            patient_id=patient_id,
            clinician_id=clinician_id,
            valid_until=valid_until,
            refills_remaining=refills_remaining,
            prescription_date=self._repository.today(),
            instructions=instructions.strip(),
        )
        for medication in medications or []:
            if _is_complete(medication):
                prescription.add_medication(medication)
        if not self._repository.add_prescription(prescription):
            return None
        return prescription

    def add_medication(
        self,
        prescription_id: str,
        name: str,
        dosage: str,
        frequency: str,
        duration: str,
        instructions: str = "",
    ) -> bool:
        medication = Medication(
            name=validation.sanitize(name),
            dosage=validation.sanitize(dosage),
            frequency=validation.sanitize(frequency),
            duration=validation.sanitize(duration),
            instructions=validation.sanitize(instructions),
        )
        if not _is_complete(medication):
            return False
        return self._repository.add_medication_to_prescription(prescription_id, medication)

    def process_refill(self, prescription_id: str) -> bool:
        return self._repository.process_refill(prescription_id)

    def cancel_prescription(self, prescription_id: str) -> bool:
        return self._repository.cancel_prescription(prescription_id)

    def get_prescriptions_for_patient(self, patient_id: str) -> List[Prescription]:
        return self._repository.get_prescriptions_by_patient(patient_id)

    def get_active_prescriptions_for_patient(self, patient_id: str) -> List[Prescription]:
        today = self._repository.today()
        return [p for p in self._repository.get_prescriptions_by_patient(patient_id) if p.is_valid(today)]

    def get_expired_prescriptions(self) -> List[Prescription]:
        today = self._repository.today()
        return [p for p in self._repository.get_all_prescriptions() if p.is_expired(today)]


def _is_complete(medication: Medication) -> bool:
    return all(
        validation.is_not_empty(value)
        for value in (medication.name, medication.dosage, medication.frequency, medication.duration)
    )


__all__ = ["PrescriptionAgent"]
