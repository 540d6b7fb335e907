"""Appointment lifecycle state machine.

| action     | refused from           | resulting status |
|------------|------------------------|------------------|
| book       | SCHEDULED              | SCHEDULED        |
| approve    | APPROVED, CANCELLED    | APPROVED         |
| reject     | REJECTED, COMPLETED    | REJECTED         |
| cancel     | CANCELLED              | CANCELLED        |
| complete   | COMPLETED              | COMPLETED        |
| reschedule | CANCELLED              | RESCHEDULED      |

A refused transition returns ``False`` and leaves the appointment as it was.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from models.appointments import Appointment, AppointmentStatus, slot_start

from .events import EventSink, LoggingEventSink


class Action(str, Enum):
    BOOK = "book"
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    COMPLETE = "complete"
    RESCHEDULE = "reschedule"


@dataclass(frozen=True)
class Transition:
    target: AppointmentStatus
    refused_from: FrozenSet[AppointmentStatus]


TRANSITIONS: Dict[Action, Transition] = {
    Action.BOOK: Transition(
        AppointmentStatus.SCHEDULED,
        frozenset({AppointmentStatus.SCHEDULED}),
    ),
    Action.APPROVE: Transition(
        AppointmentStatus.APPROVED,
        frozenset({AppointmentStatus.APPROVED, AppointmentStatus.CANCELLED}),
    ),
    Action.REJECT: Transition(
        AppointmentStatus.REJECTED,
        frozenset({AppointmentStatus.REJECTED, AppointmentStatus.COMPLETED}),
    ),
    Action.CANCEL: Transition(
        AppointmentStatus.CANCELLED,
        frozenset({AppointmentStatus.CANCELLED}),
    ),
    Action.COMPLETE: Transition(
        AppointmentStatus.COMPLETED,
        frozenset({AppointmentStatus.COMPLETED}),
    ),
    Action.RESCHEDULE: Transition(
        AppointmentStatus.RESCHEDULED,
        frozenset({AppointmentStatus.CANCELLED}),
    ),
}


@dataclass(frozen=True)
class TransitionOutcome:
    """Result of one lifecycle attempt and the event that describes it."""

    applied: bool
    event: str
    details: Dict[str, Any] = field(default_factory=dict)


class AppointmentLifecycle:
    """Applies lifecycle actions to appointments and reports every attempt."""

    def __init__(self, events: Optional[EventSink] = None) -> None:
        self._events = events or LoggingEventSink()

    @staticmethod
    def can_apply(status: AppointmentStatus, action: Action) -> bool:
        return status not in TRANSITIONS[Action(action)].refused_from

    @staticmethod
    def target_of(action: Action) -> AppointmentStatus:
        return TRANSITIONS[Action(action)].target

    @staticmethod
    def attempt(
        appointment: Appointment,
        action: Action,
        *,
        new_date: Optional[date] = None,
        new_time: Optional[time] = None,
        new_time_slot: Optional[str] = None,
    ) -> TransitionOutcome:
        """Mutate ``appointment`` if ``action`` is allowed, without emitting anything.

        The appointment is either fully updated or left untouched.
        """

        action = Action(action)
        previous = appointment.status
        refused = {
            "appointment_id": appointment.appointment_id,
            "action": action.value,
            "status": previous.value,
        }
        if previous in TRANSITIONS[action].refused_from:
            return TransitionOutcome(False, "appointment.transition_refused", refused)

        if action is Action.RESCHEDULE:
            if new_date is None or not new_time_slot:
                refused["reason"] = "missing date or time slot"
                return TransitionOutcome(False, "appointment.transition_refused", refused)
            try:
                start = slot_start(new_time_slot)
            except ValueError:
                refused["reason"] = "malformed time slot"
                return TransitionOutcome(False, "appointment.transition_refused", refused)
            appointment.date = new_date
            appointment.time_slot = new_time_slot
            appointment.time = new_time or start

        appointment.status = TRANSITIONS[action].target
        return TransitionOutcome(
            True,
            "appointment.transitioned",
            {
                "appointment_id": appointment.appointment_id,
                "action": action.value,
                "previous": previous.value,
                "status": appointment.status.value,
            },
        )

    def apply(
        self,
        appointment: Appointment,
        action: Action,
        *,
        new_date: Optional[date] = None,
        new_time: Optional[time] = None,
        new_time_slot: Optional[str] = None,
    ) -> bool:
        outcome = self.attempt(
            appointment,
            action,
            new_date=new_date,
            new_time=new_time,
            new_time_slot=new_time_slot,
        )
        self._events.emit(outcome.event, **outcome.details)
        return outcome.applied

    def book(self, appointment: Appointment) -> bool:
        return self.apply(appointment, Action.BOOK)

    def approve(self, appointment: Appointment) -> bool:
        return self.apply(appointment, Action.APPROVE)

    def reject(self, appointment: Appointment) -> bool:
        return self.apply(appointment, Action.REJECT)

    def cancel(self, appointment: Appointment) -> bool:
        return self.apply(appointment, Action.CANCEL)

    def complete(self, appointment: Appointment) -> bool:
        return self.apply(appointment, Action.COMPLETE)

    def reschedule(
        self,
        appointment: Appointment,
        new_date: date,
        new_time: Optional[time],
        new_time_slot: str,
    ) -> bool:
        return self.apply(
            appointment,
            Action.RESCHEDULE,
            new_date=new_date,
            new_time=new_time,
            new_time_slot=new_time_slot,
        )


__all__ = ["Action", "AppointmentLifecycle", "TRANSITIONS", "Transition", "TransitionOutcome"]
