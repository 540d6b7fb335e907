import unittest
from datetime import date, timedelta

from agents import MedicalRecordAgent, PrescriptionAgent
from models import Medication, PrescriptionStatus, RecordStatus
from store import EntityRepository

TODAY = date(2025, 1, 1)


class PrescriptionAgentTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = [TODAY]
        self.repository = EntityRepository(today=lambda: self.clock[0])
        self.agent = PrescriptionAgent(self.repository)

    def test_create_prescription(self) -> None:
        prescription = self.agent.create_prescription(
            "PAT001",
            "DOC002",
            "Take with water",
            TODAY + timedelta(days=30),
            refills_remaining=1,
            medications=[
                Medication("Atorvastatin", "20mg", "Nightly", "30 days"),
                Medication("", "1mg", "Daily", "5 days"),
            ],
        )

        self.assertEqual(prescription.prescription_id, "PRES002")
        self.assertEqual([m.name for m in prescription.medications], ["Atorvastatin"])
        self.assertEqual(len(self.agent.get_prescriptions_for_patient("PAT001")), 2)

    def test_create_prescription_rejects_bad_input(self) -> None:
        future = TODAY + timedelta(days=30)
        cases = [
            ("PAT001", "DOC001", "   ", future, 0),
            ("PAT001", "DOC001", "Take daily", TODAY - timedelta(days=1), 0),
            ("PAT001", "DOC001", "Take daily", future, -1),
            ("PAT404", "DOC001", "Take daily", future, 0),
            ("PAT001", "DOC404", "Take daily", future, 0),
        ]
        for args in cases:
            with self.subTest(args=args):
                self.assertIsNone(self.agent.create_prescription(*args))

    def test_add_medication(self) -> None:
        self.assertTrue(self.agent.add_medication("PRES001", " Ibuprofen ", "200mg", "As needed", "7 days"))
        self.assertFalse(self.agent.add_medication("PRES001", "Ibuprofen", "", "As needed", "7 days"))
        self.assertFalse(self.agent.add_medication("PRES404", "Ibuprofen", "200mg", "As needed", "7 days"))

        names = [m.name for m in self.repository.get_prescription("PRES001").medications]
        self.assertEqual(names, ["Lisinopril", "Metformin", "Ibuprofen"])

    def test_refill_and_cancel(self) -> None:
        self.assertTrue(self.agent.process_refill("PRES001"))
        self.assertTrue(self.agent.cancel_prescription("PRES001"))
        self.assertFalse(self.agent.process_refill("PRES001"))
        self.assertFalse(self.agent.cancel_prescription("PRES001"))

        prescription = self.repository.get_prescription("PRES001")
        self.assertIs(prescription.status, PrescriptionStatus.CANCELLED)
        self.assertEqual(prescription.refills_remaining, 1)
        self.assertEqual(self.agent.get_active_prescriptions_for_patient("PAT001"), [])

    def test_expired_prescriptions(self) -> None:
        self.assertEqual(self.agent.get_expired_prescriptions(), [])

        self.clock[0] = TODAY + timedelta(days=91)

        self.assertEqual([p.prescription_id for p in self.agent.get_expired_prescriptions()], ["PRES001"])
        self.assertFalse(self.agent.process_refill("PRES001"))


class MedicalRecordAgentTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repository = EntityRepository(today=lambda: TODAY)
        self.agent = MedicalRecordAgent(self.repository)

    def test_create_record(self) -> None:
        record = self.agent.create_record(
            "PAT001",
            "DOC003",
            "Contact dermatitis",
            "Hydrocortisone cream",
            treatment="Avoid nickel",
            symptoms=["rash", " ", "itching"],
            follow_up_date=date(2025, 1, 20),
        )

        self.assertEqual(record.record_id, "REC003")
        self.assertEqual(record.symptoms, {"rash", "itching"})
        self.assertTrue(record.follow_up_required)
        self.assertEqual(record.record_date, TODAY)
        self.assertEqual(len(self.agent.get_patient_history("PAT001")), 3)

    def test_create_record_rejects_bad_input(self) -> None:
        self.assertIsNone(self.agent.create_record("PAT001", "DOC001", "Flu", "Rest and fluids"))
        self.assertIsNone(self.agent.create_record("PAT001", "DOC001", "Influenza", "Rest"))
        self.assertIsNone(self.agent.create_record("PAT404", "DOC001", "Influenza", "Rest and fluids"))
        self.assertIsNone(self.agent.create_record("PAT001", "DOC404", "Influenza", "Rest and fluids"))

    def test_update_and_archive(self) -> None:
        self.assertFalse(self.agent.update_record("REC001", diagnosis="Flu"))
        self.assertTrue(self.agent.update_record("REC001", notes="Blood pressure stable"))
        self.assertTrue(self.agent.archive_record("REC001"))
        self.assertFalse(self.agent.archive_record("REC001"))
        self.assertFalse(self.agent.update_record("REC001", notes="Too late"))

        self.assertEqual(self.repository.get_medical_record("REC001").notes, "Blood pressure stable")
        self.assertEqual([r.record_id for r in self.agent.get_archived_records()], ["REC001"])
        self.assertEqual([r.record_id for r in self.agent.get_active_records()], ["REC002"])
        self.assertIs(self.repository.get_medical_record("REC001").status, RecordStatus.ARCHIVED)

    def test_follow_ups_due(self) -> None:
        self.assertTrue(self.agent.schedule_follow_up("REC002", date(2025, 1, 5)))

        self.assertEqual(self.agent.get_follow_ups_due(), [])
        self.assertEqual(
            [r.record_id for r in self.agent.get_follow_ups_due(date(2025, 1, 5))],
            ["REC002"],
        )
        self.assertTrue(self.agent.schedule_follow_up("REC002", None))
        self.assertEqual(self.agent.get_follow_ups_due(date(2025, 1, 5)), [])


if __name__ == "__main__":
    unittest.main()
