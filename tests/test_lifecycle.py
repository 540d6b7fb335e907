import unittest
from datetime import date, time
from typing import Any, Dict, List, Tuple

from models import Appointment, AppointmentStatus
from store.lifecycle import TRANSITIONS, Action, AppointmentLifecycle

REFUSED = {
    Action.BOOK: {AppointmentStatus.SCHEDULED},
    Action.APPROVE: {AppointmentStatus.APPROVED, AppointmentStatus.CANCELLED},
    Action.REJECT: {AppointmentStatus.REJECTED, AppointmentStatus.COMPLETED},
    Action.CANCEL: {AppointmentStatus.CANCELLED},
    Action.COMPLETE: {AppointmentStatus.COMPLETED},
    Action.RESCHEDULE: {AppointmentStatus.CANCELLED},
}

RESULT = {
    Action.BOOK: AppointmentStatus.SCHEDULED,
    Action.APPROVE: AppointmentStatus.APPROVED,
    Action.REJECT: AppointmentStatus.REJECTED,
    Action.CANCEL: AppointmentStatus.CANCELLED,
    Action.COMPLETE: AppointmentStatus.COMPLETED,
    Action.RESCHEDULE: AppointmentStatus.RESCHEDULED,
}


class RecordingSink:
    def __init__(self) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, event: str, **details: Any) -> None:
        self.events.append((event, details))


def _appointment(status: AppointmentStatus) -> Appointment:
    return Appointment(
        "APT001",
        "DOC001",
        "PAT001",
        date(2025, 1, 10),
        time(9, 0),
        "09:00-10:00",
        "Routine check",
        status=status,
        notes="first visit",
    )


class AppointmentLifecycleTests(unittest.TestCase):
    def setUp(self) -> None:
        self.sink = RecordingSink()
        self.lifecycle = AppointmentLifecycle(self.sink)

    def test_transition_table_covers_every_action(self) -> None:
        self.assertEqual(set(TRANSITIONS), set(Action))
        for action in Action:
            self.assertEqual(TRANSITIONS[action].refused_from, REFUSED[action])
            self.assertEqual(AppointmentLifecycle.target_of(action), RESULT[action])

    def test_every_status_and_action_pair(self) -> None:
        for status in AppointmentStatus:
            for action in Action:
                with self.subTest(status=status, action=action):
                    appointment = _appointment(status)
                    applied = self.lifecycle.apply(
                        appointment,
                        action,
                        new_date=date(2025, 1, 12),
                        new_time_slot="10:00-11:00",
                    )
                    allowed = status not in REFUSED[action]
                    self.assertEqual(applied, allowed)
                    self.assertEqual(AppointmentLifecycle.can_apply(status, action), allowed)
                    self.assertEqual(appointment.status, RESULT[action] if allowed else status)

    def test_refused_transition_leaves_appointment_untouched(self) -> None:
        appointment = _appointment(AppointmentStatus.CANCELLED)
        before = _appointment(AppointmentStatus.CANCELLED)

        self.assertFalse(self.lifecycle.reschedule(appointment, date(2025, 2, 1), None, "14:00-15:00"))

        self.assertEqual(appointment, before)
        self.assertEqual(self.sink.events[-1][0], "appointment.transition_refused")

    def test_reschedule_updates_date_time_and_slot(self) -> None:
        appointment = _appointment(AppointmentStatus.APPROVED)

        self.assertTrue(self.lifecycle.reschedule(appointment, date(2025, 2, 1), None, "14:00-15:00"))

        self.assertEqual(appointment.date, date(2025, 2, 1))
        self.assertEqual(appointment.time, time(14, 0))
        self.assertEqual(appointment.time_slot, "14:00-15:00")
        self.assertEqual(appointment.status, AppointmentStatus.RESCHEDULED)

    def test_reschedule_without_a_slot_is_refused(self) -> None:
        appointment = _appointment(AppointmentStatus.PENDING)

        self.assertFalse(self.lifecycle.apply(appointment, Action.RESCHEDULE, new_date=date(2025, 2, 1)))
        self.assertEqual(appointment.status, AppointmentStatus.PENDING)

    def test_malformed_slot_is_refused_without_partial_changes(self) -> None:
        appointment = _appointment(AppointmentStatus.SCHEDULED)
        before = _appointment(AppointmentStatus.SCHEDULED)

        self.assertFalse(self.lifecycle.reschedule(appointment, date(2025, 2, 1), None, "bogus"))
        self.assertFalse(self.lifecycle.reschedule(appointment, date(2025, 2, 1), time(8, 0), "bogus"))

        self.assertEqual(appointment, before)
        event, details = self.sink.events[-1]
        self.assertEqual(event, "appointment.transition_refused")
        self.assertEqual(details["reason"], "malformed time slot")

    def test_attempt_mutates_without_emitting(self) -> None:
        appointment = _appointment(AppointmentStatus.PENDING)

        outcome = AppointmentLifecycle.attempt(appointment, Action.APPROVE)

        self.assertTrue(outcome.applied)
        self.assertEqual(outcome.event, "appointment.transitioned")
        self.assertEqual(outcome.details["status"], "APPROVED")
        self.assertIs(appointment.status, AppointmentStatus.APPROVED)
        self.assertEqual(self.sink.events, [])

    def test_successful_transition_is_reported(self) -> None:
        appointment = _appointment(AppointmentStatus.PENDING)

        self.lifecycle.approve(appointment)

        event, details = self.sink.events[-1]
        self.assertEqual(event, "appointment.transitioned")
        self.assertEqual(details["previous"], "PENDING")
        self.assertEqual(details["status"], "APPROVED")

    def test_actions_accept_their_string_names(self) -> None:
        appointment = _appointment(AppointmentStatus.PENDING)

        self.assertTrue(self.lifecycle.apply(appointment, "complete"))
        self.assertEqual(appointment.status, AppointmentStatus.COMPLETED)


if __name__ == "__main__":
    unittest.main()
