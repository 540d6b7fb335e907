"""Reporting agent for MediConnect.

Builds a snapshot of the repository and renders it either as plain text
(system, appointment-range, clinician and patient reports) or as a one-page
PDF drawn with ReportLab. Report files land in ``MEDICONNECT_REPORT_DIR`` when
it is set, otherwise in ``reports/`` under the project root.
"""

from __future__ import annotations

import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from models import Appointment, PrescriptionStatus, RecordStatus
from store import EntityRepository

LOGGER = logging.getLogger(__name__)

RULE = "-" * 30


@dataclass
class SystemSummary:
    """Counts computed from the repository at one point in time."""

    generated_on: date
    total_accounts: int
    total_administrators: int
    total_clinicians: int
    total_patients: int
    total_appointments: int
    total_medical_records: int
    total_prescriptions: int
    total_scans: int
    appointments_by_status: Dict[str, int] = field(default_factory=dict)
    active_medical_records: int = 0
    active_prescriptions: int = 0
    expired_prescriptions: int = 0
    orphaned_appointments: int = 0
    store_mode: str = "memory-only"


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _reports_dir(override: Optional[Path] = None) -> Path:
    """Return the reports output directory, creating it if necessary."""

    configured = os.getenv("MEDICONNECT_REPORT_DIR")
    if override is not None:
        reports_path = Path(override)
    elif configured:
        reports_path = Path(configured)
    else:
        reports_path = _project_root() / "reports"
    reports_path.mkdir(parents=True, exist_ok=True)
    return reports_path


def build_system_summary(repository: EntityRepository) -> SystemSummary:
    stats = repository.get_statistics()
    today = repository.today()
    prescriptions = repository.get_all_prescriptions()
    records = repository.get_all_medical_records()

    summary = SystemSummary(
        generated_on=today,
        total_accounts=stats["total_accounts"],
        total_administrators=stats["total_administrators"],
        total_clinicians=stats["total_clinicians"],
        total_patients=stats["total_patients"],
        total_appointments=stats["total_appointments"],
        total_medical_records=stats["total_medical_records"],
        total_prescriptions=stats["total_prescriptions"],
        total_scans=stats["total_scans"],
        appointments_by_status={
            key: value for key, value in stats.items() if not key.startswith("total_")
        },
        active_medical_records=sum(1 for r in records if r.status is RecordStatus.ACTIVE),
        active_prescriptions=sum(1 for p in prescriptions if p.is_valid(today)),
        expired_prescriptions=sum(
            1 for p in prescriptions if p.status is PrescriptionStatus.ACTIVE and p.is_expired(today)
        ),
        orphaned_appointments=len(repository.get_orphaned_appointments()),
        store_mode="durable" if repository.is_persistent else "memory-only",
    )
    LOGGER.info(
        "Computed summary - %d accounts, %d appointments, %d prescriptions",
        summary.total_accounts,
        summary.total_appointments,
        summary.total_prescriptions,
    )
    return summary


def _status_lines(counts: Dict[str, int]) -> List[str]:
    return [f"{status}: {count}" for status, count in sorted(counts.items())]


def render_system_report(summary: SystemSummary) -> str:
    lines = [
        "=== MEDICONNECT SYSTEM REPORT ===",
        f"Generated on: {summary.generated_on.isoformat()}",
        f"Store: {summary.store_mode}",
        "",
        "ACCOUNTS:",
        RULE,
        f"Total accounts: {summary.total_accounts}",
        f"Administrators: {summary.total_administrators}",
        f"Clinicians: {summary.total_clinicians}",
        f"Patients: {summary.total_patients}",
        "",
        "APPOINTMENTS:",
        RULE,
        f"Total appointments: {summary.total_appointments}",
        *_status_lines(summary.appointments_by_status),
        f"Orphaned appointments: {summary.orphaned_appointments}",
        "",
        "CLINICAL DATA:",
        RULE,
        f"Medical records: {summary.total_medical_records} ({summary.active_medical_records} active)",
        f"Prescriptions: {summary.total_prescriptions} ({summary.active_prescriptions} valid, "
        f"{summary.expired_prescriptions} expired)",
        f"Scans: {summary.total_scans}",
    ]
    return "\n".join(lines) + "\n"


def _clinician_name(repository: EntityRepository, clinician_id: str) -> str:
    account = repository.find_clinician_by_id(clinician_id)
    return account.full_name if account is not None else "Unknown clinician"


def _patient_name(repository: EntityRepository, patient_id: str) -> str:
    account = repository.find_patient_by_id(patient_id)
    return account.full_name if account is not None else "Unknown patient"


def _in_range(appointments: Iterable[Appointment], start: date, end: date) -> List[Appointment]:
    selected = [a for a in appointments if start <= a.date <= end]
    return sorted(selected, key=lambda a: (a.date, a.time, a.appointment_id))


def render_appointment_report(repository: EntityRepository, start: date, end: date) -> str:
    if end < start:
        start, end = end, start
    appointments = _in_range(repository.get_all_appointments(), start, end)
    by_status = Counter(a.status.value for a in appointments)
    by_clinician = Counter(_clinician_name(repository, a.clinician_id) for a in appointments)

    lines = [
        "=== APPOINTMENT REPORT ===",
        f"Date range: {start.isoformat()} to {end.isoformat()}",
        f"Generated on: {repository.today().isoformat()}",
        "",
        f"Total appointments: {len(appointments)}",
        "",
        "APPOINTMENTS BY STATUS:",
        *_status_lines(dict(by_status)),
        "",
        "APPOINTMENTS BY CLINICIAN:",
        *[f"{name}: {count}" for name, count in sorted(by_clinician.items())],
        "",
        "DETAILED APPOINTMENT LIST:",
        RULE,
    ]
    for appointment in appointments:
        lines.append(
            f"{appointment.summary()} | Clinician: {_clinician_name(repository, appointment.clinician_id)} "
            f"| Patient: {_patient_name(repository, appointment.patient_id)}"
        )
    return "\n".join(lines) + "\n"


def render_clinician_report(repository: EntityRepository, clinician_id: str) -> str:
    account = repository.find_clinician_by_id(clinician_id)
    if account is None:
        return "Clinician not found\n"
    profile = account.profile
    appointments = repository.get_appointments_by_clinician(clinician_id)
    records = repository.get_medical_records_by_clinician(clinician_id)
    prescriptions = repository.get_prescriptions_by_clinician(clinician_id)

    lines = [
        "=== CLINICIAN REPORT ===",
        f"Clinician: {account.full_name} ({clinician_id})",
        f"Specialization: {profile.specialization}",
        f"Experience: {profile.experience_years} years",
        f"Generated on: {repository.today().isoformat()}",
        "",
        "APPOINTMENTS:",
        RULE,
        f"Total appointments: {len(appointments)}",
        *_status_lines(dict(Counter(a.status.value for a in appointments))),
        "",
        "MEDICAL RECORDS:",
        RULE,
        f"Total records: {len(records)}",
        f"Active records: {sum(1 for r in records if r.status is RecordStatus.ACTIVE)}",
        "",
        "PRESCRIPTIONS:",
        RULE,
        f"Total prescriptions: {len(prescriptions)}",
        f"Active prescriptions: {sum(1 for p in prescriptions if p.status is PrescriptionStatus.ACTIVE)}",
    ]
    return "\n".join(lines) + "\n"


def render_patient_report(repository: EntityRepository, patient_id: str) -> str:
    account = repository.find_patient_by_id(patient_id)
    if account is None:
        return "Patient not found\n"
    profile = account.profile
    appointments = sorted(
        repository.get_appointments_by_patient(patient_id),
        key=lambda a: (a.date, a.time, a.appointment_id),
    )
    records = repository.get_medical_records_by_patient(patient_id)
    prescriptions = repository.get_prescriptions_by_patient(patient_id)

    lines = [
        "=== PATIENT HISTORY REPORT ===",
        f"Patient: {account.full_name} ({patient_id})",
        f"Age: {profile.age} | Gender: {profile.gender} | Blood type: {profile.blood_type}",
        f"Allergies: {', '.join(sorted(profile.allergies)) or 'None recorded'}",
        f"Generated on: {repository.today().isoformat()}",
        "",
        "APPOINTMENT HISTORY:",
        RULE,
        *[appointment.summary() for appointment in appointments],
        "",
        "MEDICAL RECORDS:",
        RULE,
        *[
            f"{r.record_id} | {r.record_date.isoformat()} | {r.diagnosis} | {r.status.value}"
            for r in records
        ],
        "",
        "PRESCRIPTIONS:",
        RULE,
    ]
    for prescription in prescriptions:
        lines.append(
            f"{prescription.prescription_id} | {prescription.status.value} | "
            f"refills left: {prescription.refills_remaining}"
        )
        lines.extend(f"  - {medication}" for medication in prescription.medications)
    return "\n".join(lines) + "\n"


def export_report(report: str, filename: str, report_dir: Optional[Path] = None) -> Path:
    report_path = _reports_dir(report_dir) / filename
    report_path.write_text(report, encoding="utf-8")
    LOGGER.info("Report written to %s", report_path)
    return report_path


def _report_filename(generated_on: date) -> str:
    return f"system_report_{generated_on.isoformat()}.pdf"


def _draw_header(pdf: canvas.Canvas, title: str, generated_at: datetime) -> None:
    pdf.setFont("Helvetica-Bold", 20)
    pdf.drawString(1 * inch, 10.5 * inch, title)
    pdf.setFont("Helvetica", 10)
    pdf.drawString(
        1 * inch,
        10.1 * inch,
        f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
    )


def _draw_section(pdf: canvas.Canvas, heading: str, rows: List[str], top: float) -> float:
    """Draw a heading with its rows starting at ``top`` inches; return the next free line."""

    pdf.setFont("Helvetica-Bold", 12)
    pdf.drawString(1 * inch, top * inch, heading)
    pdf.setFont("Helvetica", 11)
    cursor = top - 0.4
    for row in rows:
        pdf.drawString(1.2 * inch, cursor * inch, row)
        cursor -= 0.3
    return cursor - 0.3


def _draw_summary(pdf: canvas.Canvas, summary: SystemSummary) -> None:
    cursor = _draw_section(
        pdf,
        "Accounts",
        [
            f"Total accounts: {summary.total_accounts}",
            f"Administrators: {summary.total_administrators}",
            f"Clinicians: {summary.total_clinicians}",
            f"Patients: {summary.total_patients}",
        ],
        9.5,
    )
    cursor = _draw_section(
        pdf,
        "Appointments",
        [f"Total appointments: {summary.total_appointments}"]
        + _status_lines(summary.appointments_by_status)
        + [f"Orphaned appointments: {summary.orphaned_appointments}"],
        cursor,
    )
    cursor = _draw_section(
        pdf,
        "Clinical Data",
        [
            f"Medical records: {summary.total_medical_records} ({summary.active_medical_records} active)",
            f"Prescriptions: {summary.total_prescriptions} ({summary.active_prescriptions} valid, "
            f"{summary.expired_prescriptions} expired)",
            f"Scans: {summary.total_scans}",
        ],
        cursor,
    )
    pdf.setFont("Helvetica", 10)
    pdf.drawString(1 * inch, cursor * inch, f"Store mode: {summary.store_mode}")


def create_pdf_report(summary: SystemSummary, report_path: Optional[Path] = None) -> Path:
    report_path = Path(report_path) if report_path else _reports_dir() / _report_filename(summary.generated_on)
    report_path.parent.mkdir(parents=True, exist_ok=True)
    pdf = canvas.Canvas(str(report_path), pagesize=letter)
    _draw_header(pdf, "MediConnect System Report", datetime.now())
    _draw_summary(pdf, summary)
    pdf.showPage()
    pdf.save()
    LOGGER.info("System report created at %s", report_path)
    return report_path


def generate_system_report(repository: EntityRepository, report_dir: Optional[Path] = None) -> Path:
    summary = build_system_summary(repository)
    return create_pdf_report(summary, _reports_dir(report_dir) / _report_filename(summary.generated_on))


__all__ = [
    "SystemSummary",
    "build_system_summary",
    "create_pdf_report",
    "export_report",
    "generate_system_report",
    "render_appointment_report",
    "render_clinician_report",
    "render_patient_report",
    "render_system_report",
]
