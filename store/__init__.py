"""Entity repository and the helpers it is built from."""

from .conflicts import find_conflicts, is_slot_free
from .events import CompositeEventSink, EventJournal, EventSink, LoggingEventSink
from .identifiers import IdentifierGenerator, IdKind
from .lifecycle import TRANSITIONS, Action, AppointmentLifecycle, Transition, TransitionOutcome
from .repository import EntityRepository, InsertOutcome

__all__ = [
    "TRANSITIONS",
    "Action",
    "AppointmentLifecycle",
    "CompositeEventSink",
    "EntityRepository",
    "EventJournal",
    "EventSink",
    "IdKind",
    "IdentifierGenerator",
    "InsertOutcome",
    "LoggingEventSink",
    "Transition",
    "TransitionOutcome",
    "find_conflicts",
    "is_slot_free",
]
