import unittest
from datetime import date, time, timedelta

from models import (
    Account,
    AdministratorProfile,
    Appointment,
    AppointmentStatus,
    ClinicianProfile,
    MedicalRecord,
    Medication,
    PatientProfile,
    Prescription,
    PrescriptionStatus,
    RecordStatus,
    Role,
    build_seed_data,
    slot_start,
)

TODAY = date(2025, 1, 1)


class AccountTests(unittest.TestCase):
    def test_role_follows_the_profile(self) -> None:
        cases = [
            (AdministratorProfile("ADM009"), Role.ADMINISTRATOR, "ADM009"),
            (ClinicianProfile("DOC009", "Neurology", "LIC009"), Role.CLINICIAN, "DOC009"),
            (PatientProfile("PAT009", 40, "Male", "O-", "5550001111"), Role.PATIENT, "PAT009"),
        ]
        for profile, role, role_id in cases:
            with self.subTest(role=role):
                account = Account("user", "Secret123!", "Some User", "u@x.com", "5551234567", "1 St", profile)
                self.assertIs(account.role, role)
                self.assertEqual(account.role_id, role_id)

    def test_validate_credentials_requires_both_fields(self) -> None:
        account = Account("user", "Secret123!", "Some User", "u@x.com", "5551234567", "1 St",
                          AdministratorProfile("ADM009"))

        self.assertTrue(account.validate_credentials("user", "Secret123!"))
        self.assertFalse(account.validate_credentials("user", "secret123!"))
        self.assertFalse(account.validate_credentials("other", "Secret123!"))

    def test_clinician_time_slots_stay_unique(self) -> None:
        profile = ClinicianProfile("DOC009", "Neurology", "LIC009")

        profile.add_time_slot("09:00-10:00")
        profile.add_time_slot("17:00-18:00")
        profile.remove_time_slot("10:00-11:00")

        self.assertEqual(profile.available_time_slots.count("09:00-10:00"), 1)
        self.assertTrue(profile.is_available_at("17:00-18:00"))
        self.assertFalse(profile.is_available_at("10:00-11:00"))

    def test_medical_history_is_append_only(self) -> None:
        profile = PatientProfile("PAT009", 40, "Male", "O-", "5550001111")

        profile.append_medical_history("Asthma")
        profile.append_medical_history("")
        profile.append_medical_history("Fractured wrist")

        self.assertEqual(profile.medical_history, "Asthma\nFractured wrist")


class AppointmentTests(unittest.TestCase):
    def test_slot_start_parses_the_label(self) -> None:
        self.assertEqual(slot_start("09:00-10:00"), time(9, 0))
        self.assertEqual(slot_start("9:30-10:30"), time(9, 30))
        with self.assertRaises(ValueError):
            slot_start("morning")

    def test_cancelled_appointments_release_their_slot(self) -> None:
        appointment = Appointment("APT001", "DOC001", "PAT001", TODAY, time(9, 0), "09:00-10:00", "Checkup")

        self.assertIs(appointment.status, AppointmentStatus.PENDING)
        self.assertTrue(appointment.holds_slot)
        appointment.status = AppointmentStatus.CANCELLED
        self.assertFalse(appointment.holds_slot)

    def test_notes_accumulate_line_by_line(self) -> None:
        appointment = Appointment("APT001", "DOC001", "PAT001", TODAY, time(9, 0), "09:00-10:00", "Checkup")

        appointment.add_note("Bring previous results")
        appointment.add_note("Fasting required")

        self.assertEqual(appointment.notes, "Bring previous results\nFasting required")

    def test_status_parse_accepts_loose_text(self) -> None:
        self.assertIs(AppointmentStatus.parse(" cancelled "), AppointmentStatus.CANCELLED)
        with self.assertRaises(ValueError):
            AppointmentStatus.parse("LOST")


class ClinicalTests(unittest.TestCase):
    def _prescription(self, **overrides) -> Prescription:
        values = dict(
            prescription_id="PRES009",
            patient_id="PAT001",
            clinician_id="DOC001",
            valid_until=TODAY + timedelta(days=30),
            refills_remaining=1,
        )
        values.update(overrides)
        return Prescription(**values)

    def test_refill_consumes_one_until_exhausted(self) -> None:
        prescription = self._prescription()

        self.assertTrue(prescription.process_refill(TODAY))
        self.assertFalse(prescription.process_refill(TODAY))
        self.assertEqual(prescription.refills_remaining, 0)

    def test_refill_refused_when_expired_or_cancelled(self) -> None:
        expired = self._prescription(valid_until=TODAY - timedelta(days=1))
        cancelled = self._prescription()
        cancelled.cancel()

        self.assertFalse(expired.process_refill(TODAY))
        self.assertFalse(cancelled.process_refill(TODAY))
        self.assertEqual(expired.refills_remaining, 1)
        self.assertEqual(cancelled.refills_remaining, 1)

    def test_prescription_without_end_date_never_expires(self) -> None:
        prescription = self._prescription(valid_until=None)

        self.assertFalse(prescription.is_expired(TODAY + timedelta(days=3650)))
        self.assertTrue(prescription.is_valid(TODAY))

    def test_cancel_is_one_way(self) -> None:
        prescription = self._prescription()

        self.assertTrue(prescription.cancel())
        self.assertFalse(prescription.cancel())
        self.assertIs(prescription.status, PrescriptionStatus.CANCELLED)

    def test_medications_keep_their_order(self) -> None:
        prescription = self._prescription()
        prescription.add_medication(Medication("B", "1mg", "daily", "5 days"))
        prescription.add_medication(Medication("A", "2mg", "daily", "5 days"))

        self.assertTrue(prescription.remove_medication("B"))
        self.assertFalse(prescription.remove_medication("C"))
        self.assertEqual([m.name for m in prescription.medications], ["A"])

    def test_archived_record_is_read_only(self) -> None:
        record = MedicalRecord("REC009", "PAT001", "DOC001", "Migraine", "Rest and fluids")

        self.assertTrue(record.update(notes="Review in two weeks"))
        self.assertTrue(record.archive())
        self.assertFalse(record.update(diagnosis="Tension headache"))
        self.assertEqual(record.diagnosis, "Migraine")
        self.assertIs(record.status, RecordStatus.ARCHIVED)

    def test_follow_up_due(self) -> None:
        record = MedicalRecord("REC009", "PAT001", "DOC001", "Migraine", "Rest and fluids")
        record.set_follow_up(True, TODAY)

        self.assertTrue(record.is_follow_up_due(TODAY))
        self.assertFalse(record.is_follow_up_due(TODAY - timedelta(days=1)))
        record.set_follow_up(False, TODAY)
        self.assertIsNone(record.follow_up_date)


class SeedDataTests(unittest.TestCase):
    def test_fixture_contents(self) -> None:
        fixture = build_seed_data(TODAY)

        self.assertEqual(len(fixture.accounts), 5)
        self.assertEqual(len(fixture.appointments), 3)
        self.assertEqual(len(fixture.medical_records), 2)
        self.assertEqual(len(fixture.prescriptions), 1)
        self.assertEqual({a.clinician_id for a in fixture.appointments}, {"DOC001", "DOC002", "DOC003"})
        self.assertTrue(all(a.status is AppointmentStatus.SCHEDULED for a in fixture.appointments))
        self.assertTrue(all(a.date > TODAY for a in fixture.appointments))
        self.assertEqual(fixture.prescriptions[0].refills_remaining, 2)

    def test_each_call_builds_fresh_objects(self) -> None:
        first = build_seed_data(TODAY)
        second = build_seed_data(TODAY)

        first.appointments[0].status = AppointmentStatus.CANCELLED

        self.assertIs(second.appointments[0].status, AppointmentStatus.SCHEDULED)


if __name__ == "__main__":
    unittest.main()
