"""Medical record agent."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

from models import MedicalRecord, RecordStatus
from store import EntityRepository

from . import validation

logger = logging.getLogger(__name__)


class MedicalRecordAgent:
    def __init__(self, repository: EntityRepository) -> None:
        self._repository = repository

    def create_record(
        self,
        patient_id: str,
        clinician_id: str,
        diagnosis: str,
        prescription: str,
        treatment: str = "",
        notes: str = "",
        symptoms: Iterable[str] = (),
        follow_up_date: Optional[date] = None,
    ) -> Optional[MedicalRecord]:
        if not validation.is_valid_diagnosis(diagnosis):
            logger.info("Medical record refused: diagnosis must be 5 to 1000 characters")
            return None
        if not validation.is_valid_prescription_text(prescription):
            logger.info("Medical record refused: prescription must be 5 to 500 characters")
            return None
        if self._repository.find_patient_by_id(patient_id) is None:
            logger.info("Medical record refused: patient %s not found", patient_id)
            return None
        if self._repository.find_clinician_by_id(clinician_id) is None:
            logger.info("Medical record refused: clinician %s not found", clinician_id)
            return None

        record = MedicalRecord(
            record_id=self._repository.generate_medical_record_id(),
            patient_id=patient_id,
            clinician_id=clinician_id,
            diagnosis=diagnosis.strip(),
            prescription=prescription.strip(),
            treatment=validation.sanitize(treatment),
            notes=validation.sanitize(notes),
            record_date=self._repository.today(),
        )
        for symptom in symptoms:
            if validation.is_not_empty(symptom):
                record.add_symptom(symptom.strip())
        if follow_up_date is not None:
            record.set_follow_up(True, follow_up_date)
        if not self._repository.add_medical_record(record):
            return None
        return record

    def update_record(
        self,
        record_id: str,
        diagnosis: str = "",
        prescription: str = "",
        treatment: str = "",
        notes: str = "",
    ) -> bool:
        if diagnosis and not validation.is_valid_diagnosis(diagnosis):
            return False
        if prescription and not validation.is_valid_prescription_text(prescription):
            return False
        return self._repository.update_medical_record(
            record_id,
            diagnosis=validation.sanitize(diagnosis),
            prescription=validation.sanitize(prescription),
            treatment=validation.sanitize(treatment),
            notes=validation.sanitize(notes),
        )

    def schedule_follow_up(self, record_id: str, follow_up_date: Optional[date]) -> bool:
        return self._repository.set_medical_record_follow_up(record_id, follow_up_date is not None, follow_up_date)

    def archive_record(self, record_id: str) -> bool:
        return self._repository.archive_medical_record(record_id)

    def get_patient_history(self, patient_id: str) -> List[MedicalRecord]:
        records = self._repository.get_medical_records_by_patient(patient_id)
        return sorted(records, key=lambda r: (r.record_date, r.record_id))

    def get_active_records(self) -> List[MedicalRecord]:
        return [r for r in self._repository.get_all_medical_records() if r.status is RecordStatus.ACTIVE]

    def get_archived_records(self) -> List[MedicalRecord]:
        return [r for r in self._repository.get_all_medical_records() if r.status is RecordStatus.ARCHIVED]

    def get_follow_ups_due(self, as_of: Optional[date] = None) -> List[MedicalRecord]:
        as_of = as_of or self._repository.today()
        return [
            r
            for r in self._repository.get_all_medical_records()
            if r.status is RecordStatus.ACTIVE and r.is_follow_up_due(as_of)
        ]


__all__ = ["MedicalRecordAgent"]
