"""Thread-safe entity repository with an optional durable mirror.

The repository owns every entity for the life of the process. Each mutation
is applied in memory under a single re-entrant lock and then offered to the
persistence adapter once the lock is released. A durable write that fails is
reported through the event sink and never undoes the in-memory change.

Nothing here raises for domain failures: "already exists", "not found" and
"not allowed" all come back as ``False``, ``None`` or an :class:`InsertOutcome`.
"""

from __future__ import annotations

import logging
import threading
from datetime import date, time
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from connector.base import PersistenceAdapter
from models import (
    Account,
    Appointment,
    AppointmentStatus,
    MedicalRecord,
    Medication,
    Prescription,
    Role,
    Scan,
    build_seed_data,
    slot_start,
)

from .conflicts import is_slot_free
from .events import CompositeEventSink, EventSink, LoggingEventSink
from .identifiers import IdentifierGenerator, IdKind
from .lifecycle import Action, AppointmentLifecycle, TransitionOutcome

logger = logging.getLogger(__name__)


class InsertOutcome(str, Enum):
    INSERTED = "INSERTED"
    DUPLICATE_ID = "DUPLICATE_ID"
    SLOT_CONFLICT = "SLOT_CONFLICT"
    INVALID = "INVALID"


class EntityRepository:
    """In-memory store of accounts, appointments and clinical records."""

    def __init__(
        self,
        adapter: Optional[PersistenceAdapter] = None,
        events: Optional[EventSink] = None,
        *,
        seed: bool = True,
        today: Callable[[], date] = date.today,
        identifiers: Optional[IdentifierGenerator] = None,
    ) -> None:
        self._events = CompositeEventSink([events or LoggingEventSink()])
        self._today = today
        self._lock = threading.RLock()
        self._ids = identifiers or IdentifierGenerator()
        self._lifecycle = AppointmentLifecycle(self._events)
        self._reset_indices()

        self._adapter = self._connect(adapter)
        if seed:
            self._load_seed()
        if self._adapter is not None:
            if seed:
                self._seed_durable()
            self._load_durable()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def _reset_indices(self) -> None:
        self._accounts: Dict[str, Account] = {}
        self._administrators: Dict[str, Account] = {}
        self._clinicians: Dict[str, Account] = {}
        self._patients: Dict[str, Account] = {}
        self._credentials: Dict[str, str] = {}
        self._roles: Dict[str, Role] = {}
        self._appointments: Dict[str, Appointment] = {}
        self._medical_records: Dict[str, MedicalRecord] = {}
        self._prescriptions: Dict[str, Prescription] = {}
        self._scans: Dict[str, Scan] = {}

    def _connect(self, adapter: Optional[PersistenceAdapter]) -> Optional[PersistenceAdapter]:
        if adapter is None:
            self._events.emit("store.memory_only", reason="no persistence adapter configured")
            return None
        try:
            reachable = bool(adapter.ping())
        except Exception as exc:  # noqa: BLE001
            logger.warning("Persistence adapter ping raised: %s", exc)
            reachable = False
        if not reachable:
            self._events.emit("store.unavailable", adapter=type(adapter).__name__)
            return None
        return adapter

    def _load_seed(self) -> None:
        fixture = build_seed_data(self._today())
        with self._lock:
            for account in fixture.accounts:
                self._index_account(account)
            for appointment in fixture.appointments:
                self._appointments[appointment.appointment_id] = appointment
            for record in fixture.medical_records:
                self._medical_records[record.record_id] = record
            for prescription in fixture.prescriptions:
                self._prescriptions[prescription.prescription_id] = prescription
        self._events.emit(
            "repository.seeded",
            accounts=len(fixture.accounts),
            appointments=len(fixture.appointments),
        )

    def _seed_durable(self) -> None:
        try:
            seeded = bool(self._adapter.seed_defaults_if_missing())
        except Exception as exc:  # noqa: BLE001
            logger.error("Seeding the durable store raised: %s", exc)
            seeded = False
        if not seeded:
            self._events.emit("store.write_failed", kind="seed", key="defaults")

    def _load_durable(self) -> None:
        """Pull every durable entity into memory. Durable copies replace seeded ones."""

        adapter = self._adapter
        sources: List[tuple] = [
            ("administrators", adapter.get_all_administrators, self._load_account),
            ("clinicians", adapter.get_all_clinicians, self._load_account),
            ("patients", adapter.get_all_patients, self._load_account),
            ("appointments", adapter.get_all_appointments, self._load_appointment),
            ("medical_records", adapter.get_all_medical_records, self._load_medical_record),
            ("prescriptions", adapter.get_all_prescriptions, self._load_prescription),
            ("scans", adapter.get_all_scans, self._load_scan),
        ]
        loaded: Dict[str, int] = {}
        for label, fetch, apply in sources:
            try:
                entities = list(fetch())
            except Exception as exc:  # noqa: BLE001
                logger.error("Loading %s from the durable store raised: %s", label, exc)
                self._events.emit("store.load_failed", kind=label)
                continue
            with self._lock:
                skipped = [entity for entity in entities if not apply(entity)]
            for entity in skipped:
                self._events.emit(
                    "appointment.load_skipped",
                    appointment_id=entity.appointment_id,
                    reason="slot already held",
                )
            loaded[label] = len(entities) - len(skipped)
        self._events.emit("store.loaded", **loaded)

    def _load_account(self, account: Account) -> bool:
        if account.username in self._accounts:
            self._unindex_account(account.username)
        self._index_account(account)
        return True

    def _load_appointment(self, appointment: Appointment) -> bool:
        if appointment.holds_slot and not is_slot_free(
            self._appointments.values(),
            appointment.clinician_id,
            appointment.date,
            appointment.time_slot,
            ignore_id=appointment.appointment_id,
        ):
            return False
        self._appointments[appointment.appointment_id] = appointment
        return True

    def _load_medical_record(self, record: MedicalRecord) -> bool:
        self._medical_records[record.record_id] = record
        return True

    def _load_prescription(self, prescription: Prescription) -> bool:
        self._prescriptions[prescription.prescription_id] = prescription
        return True

    def _load_scan(self, scan: Scan) -> bool:
        self._scans[scan.scan_id] = scan
        return True

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def adapter(self) -> Optional[PersistenceAdapter]:
        return self._adapter

    @property
    def is_persistent(self) -> bool:
        return self._adapter is not None

    @property
    def events(self) -> EventSink:
        return self._events

    def today(self) -> date:
        return self._today()

    # ------------------------------------------------------------------
    # Durable mirror
    # ------------------------------------------------------------------
    def _mirror(self, kind: str, key: str, save: Callable[[PersistenceAdapter], Any]) -> bool:
        adapter = self._adapter
        if adapter is None:
            return False
        try:
            saved = bool(save(adapter))
        except Exception as exc:  # noqa: BLE001
            logger.error("Durable write of %s %s raised: %s", kind, key, exc)
            saved = False
        if not saved:
            self._events.emit("store.write_failed", kind=kind, key=key)
        return saved

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def _role_index(self, role: Role) -> Dict[str, Account]:
        match role:
            case Role.ADMINISTRATOR:
                return self._administrators
            case Role.CLINICIAN:
                return self._clinicians
            case Role.PATIENT:
                return self._patients
        raise ValueError(f"Unknown role: {role}")

    def _index_account(self, account: Account) -> None:
        role = account.role
        self._accounts[account.username] = account
        self._role_index(role)[account.username] = account
        self._credentials[account.username] = account.password
        self._roles[account.username] = role

    def _unindex_account(self, username: str) -> Optional[Account]:
        account = self._accounts.pop(username, None)
        if account is None:
            return None
        self._role_index(self._roles.pop(username, account.role)).pop(username, None)
        self._credentials.pop(username, None)
        return account

    def _role_id_taken(self, account: Account) -> bool:
        role_id = account.role_id
        return any(
            existing.role_id == role_id for existing in self._role_index(account.role).values()
        )

    def add_account(self, account: Account) -> bool:
        if account is None or not account.username:
            return False
        try:
            role = account.role
        except TypeError:
            return False
        if not account.role_id:
            return False

        with self._lock:
            if account.username in self._accounts:
                reason = "username already registered"
            elif self._role_id_taken(account):
                reason = f"{account.role_id} already registered"
            else:
                reason = ""
                self._index_account(account)

        if reason:
            self._events.emit("account.rejected", username=account.username, reason=reason)
            return False

        self._events.emit("account.added", username=account.username, role=role.value)
        self._mirror("account", account.username, lambda store: store.save_account(account))
        return True

    def update_account(self, account: Account) -> bool:
        """Replace a stored account. The username and role must stay the same."""

        if account is None or not account.username:
            return False
        with self._lock:
            current = self._accounts.get(account.username)
            if current is None or current.role is not account.role:
                return False
            self._unindex_account(account.username)
            self._index_account(account)
        self._events.emit("account.updated", username=account.username)
        self._mirror("account", account.username, lambda store: store.save_account(account))
        return True

    def update_contact(
        self,
        username: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> bool:
        with self._lock:
            account = self._accounts.get(username)
            if account is None:
                return False
            if email is not None:
                account.email = email
            if phone is not None:
                account.phone = phone
            if address is not None:
                account.address = address
        self._events.emit("account.updated", username=username)
        self._mirror("account", username, lambda store: store.save_account(account))
        return True

    def change_password(self, username: str, new_password: str) -> bool:
        if not new_password:
            return False
        with self._lock:
            account = self._accounts.get(username)
            if account is None:
                return False
            account.password = new_password
            self._credentials[username] = new_password
        self._events.emit("account.password_changed", username=username)
        self._mirror("account", username, lambda store: store.save_account(account))
        return True

    def set_active(self, username: str, active: bool) -> bool:
        with self._lock:
            account = self._accounts.get(username)
            if account is None:
                return False
            account.active = bool(active)
        self._events.emit("account.updated", username=username, active=bool(active))
        self._mirror("account", username, lambda store: store.save_account(account))
        return True

    def get_account(self, username: str) -> Optional[Account]:
        with self._lock:
            return self._accounts.get(username)

    def get_administrator(self, username: str) -> Optional[Account]:
        with self._lock:
            return self._administrators.get(username)

    def get_clinician(self, username: str) -> Optional[Account]:
        with self._lock:
            return self._clinicians.get(username)

    def get_patient(self, username: str) -> Optional[Account]:
        with self._lock:
            return self._patients.get(username)

    def find_administrator_by_id(self, admin_id: str) -> Optional[Account]:
        return self._find_by_role_id(self._administrators, admin_id)

    def find_clinician_by_id(self, clinician_id: str) -> Optional[Account]:
        return self._find_by_role_id(self._clinicians, clinician_id)

    def find_patient_by_id(self, patient_id: str) -> Optional[Account]:
        return self._find_by_role_id(self._patients, patient_id)

    def _find_by_role_id(self, index: Dict[str, Account], role_id: str) -> Optional[Account]:
        if not role_id:
            return None
        with self._lock:
            for account in index.values():
                if account.role_id == role_id:
                    return account
        return None

    def validate_credentials(self, username: str, password: str) -> bool:
        with self._lock:
            stored = self._credentials.get(username)
        return stored is not None and stored == password

    def get_role(self, username: str) -> Optional[Role]:
        with self._lock:
            return self._roles.get(username)

    def account_exists(self, username: str) -> bool:
        with self._lock:
            return username in self._accounts

    def get_all_accounts(self) -> List[Account]:
        with self._lock:
            return list(self._accounts.values())

    def get_all_administrators(self) -> List[Account]:
        with self._lock:
            return list(self._administrators.values())

    def get_all_clinicians(self) -> List[Account]:
        with self._lock:
            return list(self._clinicians.values())

    def get_all_patients(self) -> List[Account]:
        with self._lock:
            return list(self._patients.values())

    def remove_clinician_by_id(self, clinician_id: str) -> bool:
        """Drop a clinician's account from every index.

        Appointments and records that reference the clinician are kept and
        reported as orphaned.
        """

        with self._lock:
            account = self.find_clinician_by_id(clinician_id)
            if account is None:
                return False
            self._unindex_account(account.username)
            orphaned = [
                appointment.appointment_id
                for appointment in self._appointments.values()
                if appointment.clinician_id == clinician_id
            ]

        self._events.emit(
            "clinician.removed",
            clinician_id=clinician_id,
            username=account.username,
            orphaned_appointments=orphaned,
        )
        self._mirror("account", account.username, lambda store: store.delete_account(account.username))
        return True

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------
    @staticmethod
    def _is_well_formed(appointment: Appointment) -> bool:
        if appointment is None:
            return False
        if not (appointment.appointment_id and appointment.clinician_id and appointment.patient_id):
            return False
        if not appointment.time_slot or not isinstance(appointment.date, date):
            return False
        return isinstance(appointment.time, time)

    def insert_appointment(self, appointment: Appointment) -> InsertOutcome:
        """Check the slot and insert in one critical section."""

        if not self._is_well_formed(appointment):
            self._events.emit("appointment.rejected", reason=InsertOutcome.INVALID.value)
            return InsertOutcome.INVALID

        with self._lock:
            if appointment.appointment_id in self._appointments:
                outcome = InsertOutcome.DUPLICATE_ID
            elif appointment.holds_slot and not is_slot_free(
                self._appointments.values(),
                appointment.clinician_id,
                appointment.date,
                appointment.time_slot,
            ):
                outcome = InsertOutcome.SLOT_CONFLICT
            else:
                self._appointments[appointment.appointment_id] = appointment
                outcome = InsertOutcome.INSERTED

        if outcome is not InsertOutcome.INSERTED:
            self._events.emit(
                "appointment.rejected",
                appointment_id=appointment.appointment_id,
                reason=outcome.value,
            )
            return outcome

        self._events.emit(
            "appointment.added",
            appointment_id=appointment.appointment_id,
            clinician_id=appointment.clinician_id,
            date=appointment.date.isoformat(),
            time_slot=appointment.time_slot,
        )
        self._mirror(
            "appointment",
            appointment.appointment_id,
            lambda store: store.save_appointment(appointment),
        )
        return InsertOutcome.INSERTED

    def add_appointment(self, appointment: Appointment) -> bool:
        return self.insert_appointment(appointment) is InsertOutcome.INSERTED

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        with self._lock:
            return self._appointments.get(appointment_id)

    def get_appointments_by_clinician(self, clinician_id: str) -> List[Appointment]:
        return [a for a in self.get_all_appointments() if a.clinician_id == clinician_id]

    def get_appointments_by_patient(self, patient_id: str) -> List[Appointment]:
        return [a for a in self.get_all_appointments() if a.patient_id == patient_id]

    def get_all_appointments(self) -> List[Appointment]:
        with self._lock:
            return list(self._appointments.values())

    def is_time_slot_available(
        self,
        clinician_id: str,
        appointment_date: date,
        time_slot: str,
        *,
        ignore_id: Optional[str] = None,
    ) -> bool:
        return is_slot_free(
            self.get_all_appointments(),
            clinician_id,
            appointment_date,
            time_slot,
            ignore_id=ignore_id,
        )

    def transition_appointment(
        self,
        appointment_id: str,
        action: Action | str,
        *,
        new_date: Optional[date] = None,
        new_time: Optional[time] = None,
        new_time_slot: Optional[str] = None,
    ) -> bool:
        try:
            action = Action(action)
        except ValueError:
            logger.warning("Unknown appointment action %r", action)
            return False

        with self._lock:
            appointment = self._appointments.get(appointment_id)
            if appointment is None:
                outcome = TransitionOutcome(
                    False,
                    "appointment.transition_refused",
                    {"appointment_id": appointment_id, "action": action.value, "reason": "not found"},
                )
            else:
                reason = self._slot_objection(appointment, action, new_date, new_time_slot)
                if reason:
                    outcome = TransitionOutcome(
                        False,
                        "appointment.transition_refused",
                        {
                            "appointment_id": appointment_id,
                            "action": action.value,
                            "status": appointment.status.value,
                            "reason": reason,
                        },
                    )
                else:
                    outcome = self._lifecycle.attempt(
                        appointment,
                        action,
                        new_date=new_date,
                        new_time=new_time,
                        new_time_slot=new_time_slot,
                    )

        self._events.emit(outcome.event, **outcome.details)
        if not outcome.applied:
            return False
        self._mirror("appointment", appointment_id, lambda store: store.save_appointment(appointment))
        return True

    def _slot_objection(
        self,
        appointment: Appointment,
        action: Action,
        new_date: Optional[date],
        new_time_slot: Optional[str],
    ) -> str:
        """Return why the action would break slot uniqueness, or an empty string."""

        if not self._lifecycle.can_apply(appointment.status, action):
            return ""

        if action is Action.RESCHEDULE:
            if new_date is None or not new_time_slot:
                return ""
            try:
                slot_start(new_time_slot)
            except ValueError:
                return "malformed time slot"
            target_date, target_slot = new_date, new_time_slot
        elif appointment.status is AppointmentStatus.CANCELLED and action is not Action.CANCEL:
            target_date, target_slot = appointment.date, appointment.time_slot
        else:
            return ""

        if is_slot_free(
            self._appointments.values(),
            appointment.clinician_id,
            target_date,
            target_slot,
            ignore_id=appointment.appointment_id,
        ):
            return ""
        return "slot already held"

    def book_appointment(self, appointment_id: str) -> bool:
        return self.transition_appointment(appointment_id, Action.BOOK)

    def approve_appointment(self, appointment_id: str) -> bool:
        return self.transition_appointment(appointment_id, Action.APPROVE)

    def reject_appointment(self, appointment_id: str) -> bool:
        return self.transition_appointment(appointment_id, Action.REJECT)

    def cancel_appointment(self, appointment_id: str) -> bool:
        return self.transition_appointment(appointment_id, Action.CANCEL)

    def complete_appointment(self, appointment_id: str) -> bool:
        return self.transition_appointment(appointment_id, Action.COMPLETE)

    def reschedule_appointment(
        self,
        appointment_id: str,
        new_date: date,
        new_time: Optional[time],
        new_time_slot: str,
    ) -> bool:
        return self.transition_appointment(
            appointment_id,
            Action.RESCHEDULE,
            new_date=new_date,
            new_time=new_time,
            new_time_slot=new_time_slot,
        )

    def add_appointment_note(self, appointment_id: str, note: str) -> bool:
        if not note:
            return False
        with self._lock:
            appointment = self._appointments.get(appointment_id)
            if appointment is None:
                return False
            appointment.add_note(note)
        self._mirror("appointment", appointment_id, lambda store: store.save_appointment(appointment))
        return True

    def get_orphaned_appointments(self) -> List[Appointment]:
        """Appointments whose clinician no longer has an account."""

        with self._lock:
            clinician_ids = {account.role_id for account in self._clinicians.values()}
            return [
                appointment
                for appointment in self._appointments.values()
                if appointment.clinician_id not in clinician_ids
            ]

    # ------------------------------------------------------------------
    # Medical records
    # ------------------------------------------------------------------
    def add_medical_record(self, record: MedicalRecord) -> bool:
        if record is None or not record.record_id or not record.patient_id:
            return False
        with self._lock:
            if record.record_id in self._medical_records:
                return False
            self._medical_records[record.record_id] = record
        self._events.emit("medical_record.added", record_id=record.record_id, patient_id=record.patient_id)
        self._mirror("medical_record", record.record_id, lambda store: store.save_medical_record(record))
        return True

    def get_medical_record(self, record_id: str) -> Optional[MedicalRecord]:
        with self._lock:
            return self._medical_records.get(record_id)

    def get_medical_records_by_patient(self, patient_id: str) -> List[MedicalRecord]:
        return [r for r in self.get_all_medical_records() if r.patient_id == patient_id]

    def get_medical_records_by_clinician(self, clinician_id: str) -> List[MedicalRecord]:
        return [r for r in self.get_all_medical_records() if r.clinician_id == clinician_id]

    def get_all_medical_records(self) -> List[MedicalRecord]:
        with self._lock:
            return list(self._medical_records.values())

    def update_medical_record(
        self,
        record_id: str,
        diagnosis: str = "",
        prescription: str = "",
        treatment: str = "",
        notes: str = "",
    ) -> bool:
        with self._lock:
            record = self._medical_records.get(record_id)
            if record is None or not record.update(diagnosis, prescription, treatment, notes):
                return False
        self._events.emit("medical_record.updated", record_id=record_id)
        self._mirror("medical_record", record_id, lambda store: store.save_medical_record(record))
        return True

    def set_medical_record_follow_up(
        self,
        record_id: str,
        required: bool,
        follow_up_date: Optional[date] = None,
    ) -> bool:
        with self._lock:
            record = self._medical_records.get(record_id)
            if record is None:
                return False
            record.set_follow_up(required, follow_up_date)
        self._mirror("medical_record", record_id, lambda store: store.save_medical_record(record))
        return True

    def archive_medical_record(self, record_id: str) -> bool:
        with self._lock:
            record = self._medical_records.get(record_id)
            if record is None or not record.archive():
                return False
        self._events.emit("medical_record.archived", record_id=record_id)
        self._mirror("medical_record", record_id, lambda store: store.save_medical_record(record))
        return True

    # ------------------------------------------------------------------
    # Prescriptions
    # ------------------------------------------------------------------
    def add_prescription(self, prescription: Prescription) -> bool:
        if prescription is None or not prescription.prescription_id or not prescription.patient_id:
            return False
        with self._lock:
            if prescription.prescription_id in self._prescriptions:
                return False
            self._prescriptions[prescription.prescription_id] = prescription
        self._events.emit(
            "prescription.added",
            prescription_id=prescription.prescription_id,
            patient_id=prescription.patient_id,
        )
        self._mirror(
            "prescription",
            prescription.prescription_id,
            lambda store: store.save_prescription(prescription),
        )
        return True

    def get_prescription(self, prescription_id: str) -> Optional[Prescription]:
        with self._lock:
            return self._prescriptions.get(prescription_id)

    def get_prescriptions_by_patient(self, patient_id: str) -> List[Prescription]:
        return [p for p in self.get_all_prescriptions() if p.patient_id == patient_id]

    def get_prescriptions_by_clinician(self, clinician_id: str) -> List[Prescription]:
        return [p for p in self.get_all_prescriptions() if p.clinician_id == clinician_id]

    def get_all_prescriptions(self) -> List[Prescription]:
        with self._lock:
            return list(self._prescriptions.values())

    def add_medication_to_prescription(self, prescription_id: str, medication: Medication) -> bool:
        if medication is None or not medication.name:
            return False
        with self._lock:
            prescription = self._prescriptions.get(prescription_id)
            if prescription is None or not prescription.is_valid(self._today()):
                return False
            prescription.add_medication(medication)
        self._mirror("prescription", prescription_id, lambda store: store.save_prescription(prescription))
        return True

    def process_refill(self, prescription_id: str) -> bool:
        with self._lock:
            prescription = self._prescriptions.get(prescription_id)
            if prescription is None or not prescription.process_refill(self._today()):
                return False
            remaining = prescription.refills_remaining
        self._events.emit("prescription.refilled", prescription_id=prescription_id, remaining=remaining)
        self._mirror("prescription", prescription_id, lambda store: store.save_prescription(prescription))
        return True

    def cancel_prescription(self, prescription_id: str) -> bool:
        with self._lock:
            prescription = self._prescriptions.get(prescription_id)
            if prescription is None or not prescription.cancel():
                return False
        self._events.emit("prescription.cancelled", prescription_id=prescription_id)
        self._mirror("prescription", prescription_id, lambda store: store.save_prescription(prescription))
        return True

    # ------------------------------------------------------------------
    # Scans
    # ------------------------------------------------------------------
    def add_scan(self, scan: Scan) -> bool:
        if scan is None or not scan.scan_id or not scan.patient_id or not scan.file_path:
            return False
        with self._lock:
            if scan.scan_id in self._scans:
                return False
            self._scans[scan.scan_id] = scan
        self._events.emit("scan.added", scan_id=scan.scan_id, patient_id=scan.patient_id)
        self._mirror("scan", scan.scan_id, lambda store: store.save_scan(scan))
        return True

    def get_scan(self, scan_id: str) -> Optional[Scan]:
        with self._lock:
            return self._scans.get(scan_id)

    def get_scans_by_patient(self, patient_id: str) -> List[Scan]:
        with self._lock:
            return [scan for scan in self._scans.values() if scan.patient_id == patient_id]

    def get_scans_by_appointment(self, appointment_id: str) -> List[Scan]:
        with self._lock:
            return [scan for scan in self._scans.values() if scan.appointment_id == appointment_id]

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------
    def _next_id(self, kind: IdKind, keys: Iterable[str]) -> str:
        with self._lock:
            existing: Set[str] = set(keys)
        return self._ids.next_id(kind, existing)

    def generate_appointment_id(self) -> str:
        return self._next_id(IdKind.APPOINTMENT, self._appointments)

    def generate_medical_record_id(self) -> str:
        return self._next_id(IdKind.MEDICAL_RECORD, self._medical_records)

    def generate_prescription_id(self) -> str:
        return self._next_id(IdKind.PRESCRIPTION, self._prescriptions)

    def generate_scan_id(self) -> str:
        return self._ids.next_id(IdKind.SCAN, ())

    def generate_admin_id(self) -> str:
        with self._lock:
            keys = [account.role_id for account in self._administrators.values()]
        return self._next_id(IdKind.ADMINISTRATOR, keys)

    def generate_clinician_id(self) -> str:
        with self._lock:
            keys = [account.role_id for account in self._clinicians.values()]
        return self._next_id(IdKind.CLINICIAN, keys)

    def generate_patient_id(self) -> str:
        with self._lock:
            keys = [account.role_id for account in self._patients.values()]
        return self._next_id(IdKind.PATIENT, keys)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------
    def get_statistics(self) -> Dict[str, int]:
        with self._lock:
            stats: Dict[str, int] = {
                "total_accounts": len(self._accounts),
                "total_administrators": len(self._administrators),
                "total_clinicians": len(self._clinicians),
                "total_patients": len(self._patients),
                "total_appointments": len(self._appointments),
                "total_medical_records": len(self._medical_records),
                "total_prescriptions": len(self._prescriptions),
                "total_scans": len(self._scans),
            }
            for appointment in self._appointments.values():
                key = appointment.status.value
                stats[key] = stats.get(key, 0) + 1
        return stats

    def _durable_count(self, query: Callable[[PersistenceAdapter], Optional[int]], fallback: Callable[[], int]) -> int:
        adapter = self._adapter
        if adapter is not None:
            try:
                value = query(adapter)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Durable count raised: %s", exc)
                value = None
            if value is not None:
                return int(value)
        return fallback()

    def count_accounts(self) -> int:
        return self._durable_count(lambda store: store.count_accounts(), lambda: len(self.get_all_accounts()))

    def count_clinicians(self) -> int:
        return self._durable_count(
            lambda store: store.count_clinicians(),
            lambda: len(self.get_all_clinicians()),
        )

    def count_patients(self) -> int:
        return self._durable_count(lambda store: store.count_patients(), lambda: len(self.get_all_patients()))

    def count_appointments(self) -> int:
        return self._durable_count(
            lambda store: store.count_appointments(),
            lambda: len(self.get_all_appointments()),
        )

    def count_appointments_by_status(self, status: AppointmentStatus | str) -> int:
        try:
            wanted = AppointmentStatus.parse(status)
        except ValueError:
            return 0
        return self._durable_count(
            lambda store: store.count_appointments_by_status(wanted.value),
            lambda: sum(1 for a in self.get_all_appointments() if a.status is wanted),
        )

    def count_upcoming_appointments_by_patient(self, patient_id: str) -> int:
        today = self._today()
        return self._durable_count(
            lambda store: store.count_upcoming_appointments_by_patient(patient_id, today),
            lambda: sum(
                1
                for a in self.get_appointments_by_patient(patient_id)
                if a.date >= today and a.holds_slot
            ),
        )

    def count_appointments_by_patient(self, patient_id: str) -> int:
        return self._durable_count(
            lambda store: store.count_appointments_by_patient(patient_id),
            lambda: len(self.get_appointments_by_patient(patient_id)),
        )

    def count_medical_records_by_patient(self, patient_id: str) -> int:
        return self._durable_count(
            lambda store: store.count_medical_records_by_patient(patient_id),
            lambda: len(self.get_medical_records_by_patient(patient_id)),
        )

    def count_prescriptions_by_patient(self, patient_id: str) -> int:
        return self._durable_count(
            lambda store: store.count_prescriptions_by_patient(patient_id),
            lambda: len(self.get_prescriptions_by_patient(patient_id)),
        )

    def summary(self) -> str:
        stats = self.get_statistics()
        mode = "durable" if self.is_persistent else "memory-only"
        return (
            f"Accounts: {stats['total_accounts']} | Clinicians: {stats['total_clinicians']} | "
            f"Patients: {stats['total_patients']} | Appointments: {stats['total_appointments']} | "
            f"Medical records: {stats['total_medical_records']} | "
            f"Prescriptions: {stats['total_prescriptions']} | Scans: {stats['total_scans']} | "
            f"Store: {mode}"
        )

    def clear_all_data(self) -> None:
        """Forget every in-memory entity. The durable store is left alone."""

        with self._lock:
            self._reset_indices()
            self._ids.reset()
        self._events.emit("repository.cleared")


__all__ = ["EntityRepository", "InsertOutcome"]
