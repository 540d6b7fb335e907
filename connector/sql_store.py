"""Persistence adapter mapping entities onto relational tables.

The adapter speaks plain SQL with named ``:param`` placeholders through any
client implementing :class:`~connector.base.SQLClientProtocol`, so the same
code runs against a local SQLAlchemy engine or the remote SQL gateway.

Each entity is written in one transaction that deletes its rows by natural
key and inserts them again, child rows included. Collections are stored as JSON text and
dates as ISO strings. Client failures never escape: writes report ``False``,
listings come back empty and counts come back as ``None``.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import date, datetime, time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar

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
    Scan,
    build_seed_data,
    slot_start,
)

from .base import SQLClientProtocol, Statement, StoreClientError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Row = Mapping[str, Any]

SCHEMA_STATEMENTS: Tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS accounts (
        username VARCHAR(64) PRIMARY KEY,
        password VARCHAR(255) NOT NULL,
        full_name VARCHAR(255) NOT NULL,
        email VARCHAR(255),
        phone VARCHAR(32),
        address TEXT,
        role VARCHAR(16) NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS administrators (
        admin_id VARCHAR(32) PRIMARY KEY,
        username VARCHAR(64) NOT NULL UNIQUE,
        permissions TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS clinicians (
        clinician_id VARCHAR(32) PRIMARY KEY,
        username VARCHAR(64) NOT NULL UNIQUE,
        specialization VARCHAR(255),
        license_number VARCHAR(64),
        experience_years INTEGER NOT NULL DEFAULT 0,
        qualifications TEXT,
        time_slots TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS patients (
        patient_id VARCHAR(32) PRIMARY KEY,
        username VARCHAR(64) NOT NULL UNIQUE,
        age INTEGER,
        gender VARCHAR(32),
        blood_type VARCHAR(8),
        emergency_contact VARCHAR(64),
        medical_history TEXT,
        allergies TEXT,
        current_medications TEXT,
        registration_date VARCHAR(10)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS appointments (
        appointment_id VARCHAR(32) PRIMARY KEY,
        clinician_id VARCHAR(32) NOT NULL,
        patient_id VARCHAR(32) NOT NULL,
        appointment_date VARCHAR(10) NOT NULL,
        appointment_time VARCHAR(8),
        time_slot VARCHAR(16) NOT NULL,
        reason TEXT,
        status VARCHAR(16) NOT NULL,
        notes TEXT,
        created_date VARCHAR(10)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS medical_records (
        record_id VARCHAR(32) PRIMARY KEY,
        patient_id VARCHAR(32) NOT NULL,
        clinician_id VARCHAR(32) NOT NULL,
        diagnosis TEXT,
        prescription TEXT,
        treatment TEXT,
        notes TEXT,
        record_date VARCHAR(10),
        created_at VARCHAR(32),
        status VARCHAR(16) NOT NULL,
        symptoms TEXT,
        medications TEXT,
        follow_up_required INTEGER NOT NULL DEFAULT 0,
        follow_up_date VARCHAR(10)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS prescriptions (
        prescription_id VARCHAR(32) PRIMARY KEY,
        patient_id VARCHAR(32) NOT NULL,
        clinician_id VARCHAR(32) NOT NULL,
        prescription_date VARCHAR(10),
        created_at VARCHAR(32),
        instructions TEXT,
        status VARCHAR(16) NOT NULL,
        valid_until VARCHAR(10),
        refills_remaining INTEGER NOT NULL DEFAULT 0,
        notes TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS prescription_medications (
        prescription_id VARCHAR(32) NOT NULL,
        line_no INTEGER NOT NULL,
        medication_name VARCHAR(255) NOT NULL,
        dosage VARCHAR(64),
        frequency VARCHAR(64),
        duration VARCHAR(64),
        instructions TEXT,
        PRIMARY KEY (prescription_id, line_no)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS scans (
        scan_id VARCHAR(64) PRIMARY KEY,
        patient_id VARCHAR(32) NOT NULL,
        appointment_id VARCHAR(32),
        file_path TEXT NOT NULL,
        file_type VARCHAR(64),
        file_size INTEGER NOT NULL DEFAULT 0,
        uploaded_at VARCHAR(32),
        description TEXT
    )
    """,
)

ACTIVE_SLOT_INDEX = (
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_appointments_active_slot "
    "ON appointments (clinician_id, appointment_date, time_slot) "
    "WHERE status <> 'CANCELLED'"
)

ACCOUNT_COLUMNS = "a.username, a.password, a.full_name, a.email, a.phone, a.address, a.is_active"


# ----------------------------------------------------------------------
# Value conversion
# ----------------------------------------------------------------------
def _dump_list(values: Iterable[str]) -> str:
    return json.dumps(list(values))


def _load_list(raw: Any) -> List[str]:
    """Decode a JSON list column. Legacy comma-separated text is accepted too."""

    if raw is None or raw == "":
        return []
    if isinstance(raw, (list, tuple)):
        return [str(item) for item in raw]
    text = str(raw).strip()
    if text.startswith("["):
        try:
            decoded = json.loads(text)
        except ValueError:
            logger.warning("Ignoring malformed JSON list column: %r", text[:80])
            return []
        return [str(item) for item in decoded]
    return [item.strip() for item in text.split(",") if item.strip()]


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    return datetime.fromisoformat(str(value))


def _as_time(value: Any, time_slot: str) -> time:
    if isinstance(value, time):
        return value
    if value:
        return time.fromisoformat(str(value))
    return slot_start(time_slot)


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    return int(value)


# ----------------------------------------------------------------------
# Entity <-> row mapping
# ----------------------------------------------------------------------
def _replace(table: str, key_column: str, row: Dict[str, Any]) -> List[Statement]:
    """Statements that swap the stored row keyed by ``row[key_column]`` for ``row``."""

    columns = ", ".join(row)
    placeholders = ", ".join(f":{column}" for column in row)
    return [
        (f"DELETE FROM {table} WHERE {key_column} = :{key_column}", {key_column: row[key_column]}),
        (f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", row),
    ]


def _account_row(account: Account) -> Dict[str, Any]:
    return {
        "username": account.username,
        "password": account.password,
        "full_name": account.full_name,
        "email": account.email,
        "phone": account.phone,
        "address": account.address,
        "role": account.role.value,
        "is_active": int(account.active),
    }


def _profile_row(account: Account) -> Tuple[str, Dict[str, Any]]:
    """Return ``(table, row)`` for the role payload of ``account``."""

    match account.profile:
        case AdministratorProfile() as profile:
            return "administrators", {
                "admin_id": profile.admin_id,
                "username": account.username,
                "permissions": _dump_list(sorted(profile.permissions)),
            }
        case ClinicianProfile() as profile:
            return "clinicians", {
                "clinician_id": profile.clinician_id,
                "username": account.username,
                "specialization": profile.specialization,
                "license_number": profile.license_number,
                "experience_years": profile.experience_years,
                "qualifications": _dump_list(sorted(profile.qualifications)),
                "time_slots": _dump_list(profile.available_time_slots),
            }
        case PatientProfile() as profile:
            return "patients", {
                "patient_id": profile.patient_id,
                "username": account.username,
                "age": profile.age,
                "gender": profile.gender,
                "blood_type": profile.blood_type,
                "emergency_contact": profile.emergency_contact,
                "medical_history": profile.medical_history,
                "allergies": _dump_list(sorted(profile.allergies)),
                "current_medications": _dump_list(sorted(profile.current_medications)),
                "registration_date": _iso(profile.registration_date),
            }
    raise TypeError(f"Unsupported profile type: {type(account.profile).__name__}")


def _account_from_row(row: Row, profile: Any) -> Account:
    return Account(
        username=row["username"],
        password=row["password"],
        full_name=row["full_name"],
        email=row.get("email") or "",
        phone=row.get("phone") or "",
        address=row.get("address") or "",
        profile=profile,
        active=bool(_as_int(row.get("is_active"), 1)),
    )


def _administrator_from_row(row: Row) -> Account:
    profile = AdministratorProfile(
        admin_id=row["admin_id"],
        permissions=set(_load_list(row.get("permissions"))),
    )
    return _account_from_row(row, profile)


def _clinician_from_row(row: Row) -> Account:
    profile = ClinicianProfile(
        clinician_id=row["clinician_id"],
        specialization=row.get("specialization") or "",
        license_number=row.get("license_number") or "",
        experience_years=_as_int(row.get("experience_years")),
        qualifications=set(_load_list(row.get("qualifications"))),
    )
    slots = _load_list(row.get("time_slots"))
    if slots:
        profile.available_time_slots = list(dict.fromkeys(slots))
    return _account_from_row(row, profile)


def _patient_from_row(row: Row) -> Account:
    profile = PatientProfile(
        patient_id=row["patient_id"],
        age=_as_int(row.get("age")),
        gender=row.get("gender") or "",
        blood_type=row.get("blood_type") or "",
        emergency_contact=row.get("emergency_contact") or "",
        medical_history=row.get("medical_history") or "",
        allergies=set(_load_list(row.get("allergies"))),
        current_medications=set(_load_list(row.get("current_medications"))),
        registration_date=_as_date(row.get("registration_date")) or date.today(),
    )
    return _account_from_row(row, profile)


def _appointment_row(appointment: Appointment) -> Dict[str, Any]:
    return {
        "appointment_id": appointment.appointment_id,
        "clinician_id": appointment.clinician_id,
        "patient_id": appointment.patient_id,
        "appointment_date": _iso(appointment.date),
        "appointment_time": appointment.time.strftime("%H:%M"),
        "time_slot": appointment.time_slot,
        "reason": appointment.reason,
        "status": appointment.status.value,
        "notes": appointment.notes,
        "created_date": _iso(appointment.created_date),
    }


def _appointment_from_row(row: Row) -> Appointment:
    time_slot = row["time_slot"]
    return Appointment(
        appointment_id=row["appointment_id"],
        clinician_id=row["clinician_id"],
        patient_id=row["patient_id"],
        date=_as_date(row["appointment_date"]),
        time=_as_time(row.get("appointment_time"), time_slot),
        time_slot=time_slot,
        reason=row.get("reason") or "",
        status=AppointmentStatus.parse(row["status"]),
        notes=row.get("notes") or "",
        created_date=_as_date(row.get("created_date")) or date.today(),
    )


def _record_row(record: MedicalRecord) -> Dict[str, Any]:
    return {
        "record_id": record.record_id,
        "patient_id": record.patient_id,
        "clinician_id": record.clinician_id,
        "diagnosis": record.diagnosis,
        "prescription": record.prescription,
        "treatment": record.treatment,
        "notes": record.notes,
        "record_date": _iso(record.record_date),
        "created_at": record.created_at.isoformat(),
        "status": record.status.value,
        "symptoms": _dump_list(sorted(record.symptoms)),
        "medications": _dump_list(sorted(record.medications)),
        "follow_up_required": int(record.follow_up_required),
        "follow_up_date": _iso(record.follow_up_date),
    }


def _record_from_row(row: Row) -> MedicalRecord:
    return MedicalRecord(
        record_id=row["record_id"],
        patient_id=row["patient_id"],
        clinician_id=row["clinician_id"],
        diagnosis=row.get("diagnosis") or "",
        prescription=row.get("prescription") or "",
        treatment=row.get("treatment") or "",
        notes=row.get("notes") or "",
        record_date=_as_date(row.get("record_date")) or date.today(),
        created_at=_as_datetime(row.get("created_at")) or datetime.now(),
        status=RecordStatus(str(row["status"]).upper()),
        symptoms=set(_load_list(row.get("symptoms"))),
        medications=set(_load_list(row.get("medications"))),
        follow_up_required=bool(_as_int(row.get("follow_up_required"))),
        follow_up_date=_as_date(row.get("follow_up_date")),
    )


def _prescription_row(prescription: Prescription) -> Dict[str, Any]:
    return {
        "prescription_id": prescription.prescription_id,
        "patient_id": prescription.patient_id,
        "clinician_id": prescription.clinician_id,
        "prescription_date": _iso(prescription.prescription_date),
        "created_at": prescription.created_at.isoformat(),
        "instructions": prescription.instructions,
        "status": prescription.status.value,
        "valid_until": _iso(prescription.valid_until),
        "refills_remaining": prescription.refills_remaining,
        "notes": prescription.notes,
    }


def _prescription_from_row(row: Row, medications: List[Medication]) -> Prescription:
    return Prescription(
        prescription_id=row["prescription_id"],
        patient_id=row["patient_id"],
        clinician_id=row["clinician_id"],
        valid_until=_as_date(row.get("valid_until")),
        refills_remaining=max(0, _as_int(row.get("refills_remaining"))),
        prescription_date=_as_date(row.get("prescription_date")) or date.today(),
        created_at=_as_datetime(row.get("created_at")) or datetime.now(),
        medications=medications,
        instructions=row.get("instructions") or "",
        status=PrescriptionStatus(str(row["status"]).upper()),
        notes=row.get("notes") or "",
    )


def _medication_from_row(row: Row) -> Medication:
    return Medication(
        name=row["medication_name"],
        dosage=row.get("dosage") or "",
        frequency=row.get("frequency") or "",
        duration=row.get("duration") or "",
        instructions=row.get("instructions") or "",
    )


def _scan_row(scan: Scan) -> Dict[str, Any]:
    return {
        "scan_id": scan.scan_id,
        "patient_id": scan.patient_id,
        "appointment_id": scan.appointment_id,
        "file_path": scan.file_path,
        "file_type": scan.file_type,
        "file_size": scan.size_bytes,
        "uploaded_at": scan.uploaded_at.isoformat(),
        "description": scan.description,
    }


def _scan_from_row(row: Row) -> Scan:
    return Scan(
        scan_id=row["scan_id"],
        patient_id=row["patient_id"],
        appointment_id=row.get("appointment_id") or None,
        file_path=row["file_path"],
        file_type=row.get("file_type") or "",
        size_bytes=_as_int(row.get("file_size")),
        uploaded_at=_as_datetime(row.get("uploaded_at")) or datetime.now(),
        description=row.get("description") or "",
    )


class SQLPersistenceAdapter:
    """Durable store for the entity repository on top of a SQL client."""

    def __init__(
        self,
        client: SQLClientProtocol,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._client = client
        self._today = today
        self._lock = threading.Lock()

    @property
    def client(self) -> SQLClientProtocol:
        return self._client

    # ------------------------------------------------------------------
    # Schema and health
    # ------------------------------------------------------------------
    def create_schema(self, *, active_slot_index: bool = True) -> bool:
        """Create every table. The partial slot index needs sqlite or PostgreSQL."""

        statements: List[Statement] = [(statement, None) for statement in SCHEMA_STATEMENTS]
        if active_slot_index:
            statements.append((ACTIVE_SLOT_INDEX, None))
        try:
            self._client.execute_many(statements)
        except StoreClientError as exc:
            logger.error("Failed to create schema: %s", exc)
            return False
        logger.info("Durable schema is in place")
        return True

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except StoreClientError as exc:
            logger.warning("Durable store ping failed: %s", exc)
            return False

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def save_account(self, account: Account) -> bool:
        return self._write(f"save account {account.username}", self._store_account, account)

    def delete_account(self, username: str) -> bool:
        statements: List[Statement] = [
            (f"DELETE FROM {table} WHERE username = :username", {"username": username})
            for table in ("administrators", "clinicians", "patients", "accounts")
        ]
        return self._write(f"delete account {username}", self._client.execute_many, statements)

    def save_appointment(self, appointment: Appointment) -> bool:
        return self._write(
            f"save appointment {appointment.appointment_id}",
            self._store_appointment,
            appointment,
        )

    def save_medical_record(self, record: MedicalRecord) -> bool:
        return self._write(f"save medical record {record.record_id}", self._store_medical_record, record)

    def save_prescription(self, prescription: Prescription) -> bool:
        return self._write(
            f"save prescription {prescription.prescription_id}",
            self._store_prescription,
            prescription,
        )

    def save_scan(self, scan: Scan) -> bool:
        return self._write(f"save scan {scan.scan_id}", self._store_scan, scan)

    def _store_account(self, account: Account) -> None:
        table, profile_row = _profile_row(account)
        statements = _replace("accounts", "username", _account_row(account))
        statements.extend(_replace(table, "username", profile_row))
        self._commit(statements)

    def _store_appointment(self, appointment: Appointment) -> None:
        self._commit(_replace("appointments", "appointment_id", _appointment_row(appointment)))

    def _store_medical_record(self, record: MedicalRecord) -> None:
        self._commit(_replace("medical_records", "record_id", _record_row(record)))

    def _store_prescription(self, prescription: Prescription) -> None:
        statements = _replace("prescriptions", "prescription_id", _prescription_row(prescription))
        statements.append(
            (
                "DELETE FROM prescription_medications WHERE prescription_id = :prescription_id",
                {"prescription_id": prescription.prescription_id},
            )
        )
        for line_no, medication in enumerate(prescription.medications, start=1):
            statements.append(
                (
                    "INSERT INTO prescription_medications "
                    "(prescription_id, line_no, medication_name, dosage, frequency, duration, instructions) "
                    "VALUES (:prescription_id, :line_no, :medication_name, :dosage, :frequency, "
                    ":duration, :instructions)",
                    {
                        "prescription_id": prescription.prescription_id,
                        "line_no": line_no,
                        "medication_name": medication.name,
                        "dosage": medication.dosage,
                        "frequency": medication.frequency,
                        "duration": medication.duration,
                        "instructions": medication.instructions,
                    },
                )
            )
        self._commit(statements)

    def _store_scan(self, scan: Scan) -> None:
        self._commit(_replace("scans", "scan_id", _scan_row(scan)))

    def _commit(self, statements: List[Statement]) -> None:
        """Run every statement of one entity in a single transaction."""

        with self._lock:
            self._client.execute_many(statements)

    def _write(self, description: str, action: Callable[..., Any], *args: Any) -> bool:
        try:
            action(*args)
        except StoreClientError as exc:
            logger.error("Failed to %s: %s", description, exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_all_administrators(self) -> List[Account]:
        return self._load(
            "administrators",
            f"SELECT {ACCOUNT_COLUMNS}, r.admin_id, r.permissions "
            "FROM accounts a JOIN administrators r ON r.username = a.username "
            "ORDER BY r.admin_id",
            _administrator_from_row,
        )

    def get_all_clinicians(self) -> List[Account]:
        return self._load(
            "clinicians",
            f"SELECT {ACCOUNT_COLUMNS}, r.clinician_id, r.specialization, r.license_number, "
            "r.experience_years, r.qualifications, r.time_slots "
            "FROM accounts a JOIN clinicians r ON r.username = a.username "
            "ORDER BY r.clinician_id",
            _clinician_from_row,
        )

    def get_all_patients(self) -> List[Account]:
        return self._load(
            "patients",
            f"SELECT {ACCOUNT_COLUMNS}, r.patient_id, r.age, r.gender, r.blood_type, "
            "r.emergency_contact, r.medical_history, r.allergies, r.current_medications, "
            "r.registration_date "
            "FROM accounts a JOIN patients r ON r.username = a.username "
            "ORDER BY r.patient_id",
            _patient_from_row,
        )

    def get_all_appointments(self) -> List[Appointment]:
        return self._load(
            "appointments",
            "SELECT * FROM appointments ORDER BY appointment_id",
            _appointment_from_row,
        )

    def get_all_medical_records(self) -> List[MedicalRecord]:
        return self._load(
            "medical records",
            "SELECT * FROM medical_records ORDER BY record_id",
            _record_from_row,
        )

    def get_all_prescriptions(self) -> List[Prescription]:
        try:
            rows = self._client.fetch_all("SELECT * FROM prescriptions ORDER BY prescription_id")
            line_rows = self._client.fetch_all(
                "SELECT * FROM prescription_medications ORDER BY prescription_id, line_no"
            )
        except StoreClientError as exc:
            logger.error("Failed to load prescriptions: %s", exc)
            return []

        lines: Dict[str, List[Medication]] = {}
        for line in line_rows:
            lines.setdefault(line["prescription_id"], []).append(_medication_from_row(line))

        prescriptions: List[Prescription] = []
        for row in rows:
            try:
                prescriptions.append(_prescription_from_row(row, lines.get(row["prescription_id"], [])))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed prescription row %s: %s", row.get("prescription_id"), exc)
        return prescriptions

    def get_all_scans(self) -> List[Scan]:
        return self._load("scans", "SELECT * FROM scans ORDER BY uploaded_at, scan_id", _scan_from_row)

    def get_scans_by_patient(self, patient_id: str) -> List[Scan]:
        return self._load(
            "scans",
            "SELECT * FROM scans WHERE patient_id = :patient_id ORDER BY uploaded_at, scan_id",
            _scan_from_row,
            {"patient_id": patient_id},
        )

    def get_scans_by_appointment(self, appointment_id: str) -> List[Scan]:
        return self._load(
            "scans",
            "SELECT * FROM scans WHERE appointment_id = :appointment_id ORDER BY uploaded_at, scan_id",
            _scan_from_row,
            {"appointment_id": appointment_id},
        )

    def _load(
        self,
        label: str,
        query: str,
        convert: Callable[[Row], T],
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[T]:
        try:
            rows = self._client.fetch_all(query, params)
        except StoreClientError as exc:
            logger.error("Failed to load %s: %s", label, exc)
            return []

        entities: List[T] = []
        for row in rows:
            try:
                entities.append(convert(row))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed %s row: %s", label, exc)
        return entities

    # ------------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------------
    def count_accounts(self) -> Optional[int]:
        return self._count("SELECT COUNT(*) AS total FROM accounts")

    def count_clinicians(self) -> Optional[int]:
        return self._count("SELECT COUNT(*) AS total FROM clinicians")

    def count_patients(self) -> Optional[int]:
        return self._count("SELECT COUNT(*) AS total FROM patients")

    def count_appointments(self) -> Optional[int]:
        return self._count("SELECT COUNT(*) AS total FROM appointments")

    def count_appointments_by_status(self, status: str) -> Optional[int]:
        return self._count(
            "SELECT COUNT(*) AS total FROM appointments WHERE UPPER(status) = :status",
            {"status": str(status).strip().upper()},
        )

    def count_upcoming_appointments_by_patient(self, patient_id: str, today: date) -> Optional[int]:
        return self._count(
            "SELECT COUNT(*) AS total FROM appointments "
            "WHERE patient_id = :patient_id AND appointment_date >= :today "
            "AND UPPER(status) <> 'CANCELLED'",
            {"patient_id": patient_id, "today": today.isoformat()},
        )

    def count_appointments_by_patient(self, patient_id: str) -> Optional[int]:
        return self._count(
            "SELECT COUNT(*) AS total FROM appointments WHERE patient_id = :patient_id",
            {"patient_id": patient_id},
        )

    def count_medical_records_by_patient(self, patient_id: str) -> Optional[int]:
        return self._count(
            "SELECT COUNT(*) AS total FROM medical_records WHERE patient_id = :patient_id",
            {"patient_id": patient_id},
        )

    def count_prescriptions_by_patient(self, patient_id: str) -> Optional[int]:
        return self._count(
            "SELECT COUNT(*) AS total FROM prescriptions WHERE patient_id = :patient_id",
            {"patient_id": patient_id},
        )

    def _count(self, query: str, params: Optional[Mapping[str, Any]] = None) -> Optional[int]:
        try:
            rows = self._client.fetch_all(query, params)
        except StoreClientError as exc:
            logger.error("Count query failed: %s", exc)
            return None
        if not rows:
            return 0
        try:
            return int(rows[0]["total"])
        except (KeyError, TypeError, ValueError):
            logger.error("Count query returned an unexpected row: %s", rows[0])
            return None

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------
    def seed_defaults_if_missing(self) -> bool:
        """Insert each fixture entity whose natural key is absent from the store."""

        seed = build_seed_data(self._today())
        planned: List[Tuple[str, str, str, Callable[[Any], None], Any]] = []
        for account in seed.accounts:
            planned.append(("accounts", "username", account.username, self._store_account, account))
        for appointment in seed.appointments:
            planned.append(
                ("appointments", "appointment_id", appointment.appointment_id, self._store_appointment, appointment)
            )
        for record in seed.medical_records:
            planned.append(("medical_records", "record_id", record.record_id, self._store_medical_record, record))
        for prescription in seed.prescriptions:
            planned.append(
                (
                    "prescriptions",
                    "prescription_id",
                    prescription.prescription_id,
                    self._store_prescription,
                    prescription,
                )
            )

        complete = True
        inserted = 0
        for table, key_column, key, store, entity in planned:
            try:
                if self._exists(table, key_column, key):
                    continue
                store(entity)
                inserted += 1
            except StoreClientError as exc:
                logger.error("Failed to seed %s %s: %s", table, key, exc)
                complete = False
        if inserted:
            logger.info("Seeded %d default entities into the durable store", inserted)
        return complete

    def _exists(self, table: str, key_column: str, key: str) -> bool:
        rows: Sequence[Row] = self._client.fetch_all(
            f"SELECT {key_column} FROM {table} WHERE {key_column} = :key",
            {"key": key},
        )
        return bool(rows)


__all__ = ["ACTIVE_SLOT_INDEX", "SCHEMA_STATEMENTS", "SQLPersistenceAdapter"]
