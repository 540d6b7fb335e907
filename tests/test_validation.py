import unittest
from datetime import date

from agents import validation


class ValidationTests(unittest.TestCase):
    def test_email(self) -> None:
        self.assertTrue(validation.is_valid_email("jane.doe+clinic@example.co.uk"))
        self.assertFalse(validation.is_valid_email("jane@localhost"))
        self.assertFalse(validation.is_valid_email(None))

    def test_phone_ignores_formatting(self) -> None:
        self.assertTrue(validation.is_valid_phone("+44 (20) 7946-0958"))
        self.assertFalse(validation.is_valid_phone("555-1234"))

    def test_password_rules(self) -> None:
        self.assertTrue(validation.is_valid_password("Secret123"))
        self.assertTrue(validation.is_valid_password("Admin123!"))
        self.assertFalse(validation.is_valid_password("secret123"))
        self.assertFalse(validation.is_valid_password("SECRET123"))
        self.assertFalse(validation.is_valid_password("Secret12 3"))
        self.assertFalse(validation.is_valid_password("        "))

    def test_username_and_name(self) -> None:
        self.assertTrue(validation.is_valid_username("dr_who_2"))
        self.assertFalse(validation.is_valid_username("ab"))
        self.assertTrue(validation.is_valid_name("Dr. Mary-Jane O'Neil"))
        self.assertFalse(validation.is_valid_name("R2D2"))

    def test_patient_fields(self) -> None:
        self.assertTrue(validation.is_valid_age(0))
        self.assertFalse(validation.is_valid_age(True))
        self.assertFalse(validation.is_valid_age("30"))
        self.assertTrue(validation.is_valid_gender("Prefer not to say"))
        self.assertTrue(validation.is_valid_blood_type("ab-"))
        self.assertFalse(validation.is_valid_blood_type("AB"))

    def test_dates_and_slots(self) -> None:
        today = date(2025, 1, 1)

        self.assertEqual(validation.parse_date(" 2025-01-10 "), date(2025, 1, 10))
        self.assertIsNone(validation.parse_date("2025-13-01"))
        self.assertIsNone(validation.parse_date(20250110))
        self.assertTrue(validation.is_future_date("2025-01-01", today))
        self.assertFalse(validation.is_future_date("2024-12-31", today))
        self.assertTrue(validation.is_valid_time_slot("9:00-10:00"))
        self.assertFalse(validation.is_valid_time_slot("24:00-25:00"))

    def test_text_lengths(self) -> None:
        self.assertFalse(validation.is_valid_appointment_reason("Too short"))
        self.assertTrue(validation.is_valid_appointment_reason("Knee pain after a fall"))
        self.assertFalse(validation.is_valid_diagnosis("Flu"))
        self.assertTrue(validation.is_valid_prescription_text("Rest well"))
        self.assertFalse(validation.is_valid_appointment_reason("x" * 501))

    def test_enumerations(self) -> None:
        self.assertTrue(validation.is_valid_role("admin"))
        self.assertFalse(validation.is_valid_role("nurse"))
        self.assertTrue(validation.is_valid_appointment_status("rescheduled"))
        self.assertFalse(validation.is_valid_appointment_status("LOST"))


if __name__ == "__main__":
    unittest.main()
