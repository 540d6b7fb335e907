import unittest
from datetime import date, time

from models import Appointment, AppointmentStatus
from store.conflicts import find_conflicts, is_slot_free

DAY = date(2025, 1, 10)


def _appointment(appointment_id: str, status: AppointmentStatus, *, slot: str = "09:00-10:00") -> Appointment:
    return Appointment(
        appointment_id,
        "DOC001",
        "PAT001",
        DAY,
        time(9, 0),
        slot,
        "Routine check",
        status=status,
    )


class ConflictCheckerTests(unittest.TestCase):
    def test_empty_schedule_is_free(self) -> None:
        self.assertTrue(is_slot_free([], "DOC001", DAY, "09:00-10:00"))

    def test_any_non_cancelled_status_holds_the_slot(self) -> None:
        for status in AppointmentStatus:
            if status is AppointmentStatus.CANCELLED:
                continue
            with self.subTest(status=status):
                self.assertFalse(
                    is_slot_free([_appointment("APT001", status)], "DOC001", DAY, "09:00-10:00")
                )

    def test_cancelled_appointment_frees_the_slot(self) -> None:
        schedule = [_appointment("APT001", AppointmentStatus.CANCELLED)]

        self.assertTrue(is_slot_free(schedule, "DOC001", DAY, "09:00-10:00"))

    def test_other_clinician_date_or_slot_do_not_conflict(self) -> None:
        schedule = [_appointment("APT001", AppointmentStatus.SCHEDULED)]

        self.assertTrue(is_slot_free(schedule, "DOC002", DAY, "09:00-10:00"))
        self.assertTrue(is_slot_free(schedule, "DOC001", date(2025, 1, 11), "09:00-10:00"))
        self.assertTrue(is_slot_free(schedule, "DOC001", DAY, "10:00-11:00"))

    def test_ignore_id_excludes_the_appointment_being_moved(self) -> None:
        schedule = [_appointment("APT001", AppointmentStatus.SCHEDULED)]

        self.assertTrue(is_slot_free(schedule, "DOC001", DAY, "09:00-10:00", ignore_id="APT001"))

    def test_find_conflicts_returns_the_holders(self) -> None:
        holder = _appointment("APT002", AppointmentStatus.APPROVED)
        schedule = [_appointment("APT001", AppointmentStatus.CANCELLED), holder]

        self.assertEqual(find_conflicts(schedule, "DOC001", DAY, "09:00-10:00"), [holder])


if __name__ == "__main__":
    unittest.main()
