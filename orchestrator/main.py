"""Command-line entry point for MediConnect.

Builds the persistence adapter and event sinks from :class:`Settings`, owns
the repository for the lifetime of the command and runs one of the
``summary``, ``report`` or ``init-store`` commands.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional

if __package__ is None or __package__ == "":  # pragma: no cover - runtime safety for script execution
    sys.path.append(str(Path(__file__).resolve().parent.parent))

from agents import reports
from connector import EngineSQLClient, SQLGatewayClient, SQLPersistenceAdapter, StoreClientError
from orchestrator.settings import Settings
from store import CompositeEventSink, EntityRepository, EventJournal, EventSink, LoggingEventSink

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
PARTIAL_INDEX_DIALECTS = frozenset({"sqlite", "postgresql"})


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


def build_events(settings: Settings) -> EventSink:
    sinks: List[EventSink] = [LoggingEventSink()]
    if settings.event_log is not None:
        sinks.append(EventJournal(settings.event_log))
    return sinks[0] if len(sinks) == 1 else CompositeEventSink(sinks)


def build_adapter(settings: Settings, *, create_schema: bool = True) -> Optional[SQLPersistenceAdapter]:
    """Return an adapter for the configured store, or ``None`` to run memory-only."""

    try:
        if settings.database_url:
            client = EngineSQLClient(settings.database_url)
            adapter = SQLPersistenceAdapter(client)
            if create_schema and client.ping():
                adapter.create_schema(active_slot_index=client.dialect in PARTIAL_INDEX_DIALECTS)
            return adapter
        if settings.gateway_url:
            gateway = SQLGatewayClient(
                base_url=settings.gateway_url,
                token_url=settings.token_url,
                client_id=settings.client_id,
                client_secret=settings.client_secret,
            )
            return SQLPersistenceAdapter(gateway)
    except (ValueError, StoreClientError) as exc:
        logger.error("Durable store is misconfigured, running memory-only: %s", exc)
    return None


def build_repository(settings: Settings, events: Optional[EventSink] = None) -> EntityRepository:
    events = events or build_events(settings)
    return EntityRepository(build_adapter(settings), events, seed=settings.seed)


def execute_with_logging(
    command: str,
    action: Callable[[], int],
    events: EventSink,
) -> int:
    """Run ``action`` while emitting a start and an end event."""

    events.emit("command.started", command=command)
    status = "failed"
    try:
        exit_code = action()
        status = "success" if exit_code == 0 else "failed"
        return exit_code
    finally:
        events.emit("command.finished", command=command, status=status)


def run_summary(repository: EntityRepository) -> int:
    print(repository.summary())
    print(reports.render_system_report(reports.build_system_summary(repository)), end="")
    return 0


def run_report(repository: EntityRepository, args: argparse.Namespace, settings: Settings) -> int:
    report_dir = args.output_dir or settings.report_dir
    pdf_path = reports.generate_system_report(repository, report_dir)
    print(f"System report: {pdf_path}")

    if args.start or args.end:
        today = repository.today()
        start = args.start or today
        end = args.end or start
        text = reports.render_appointment_report(repository, start, end)
        path = reports.export_report(
            text,
            f"appointments_{start.isoformat()}_{end.isoformat()}.txt",
            report_dir,
        )
        print(f"Appointment report: {path}")

    if args.clinician:
        text = reports.render_clinician_report(repository, args.clinician)
        path = reports.export_report(text, f"clinician_{args.clinician}.txt", report_dir)
        print(f"Clinician report: {path}")
    return 0


def run_init_store(settings: Settings) -> int:
    if not settings.store_configured:
        logger.error("No durable store configured; set MEDICONNECT_DATABASE_URL or MEDICONNECT_SQL_GATEWAY_URL")
        return 1
    adapter = build_adapter(settings, create_schema=False)
    if adapter is None or not adapter.ping():
        logger.error("Durable store is unreachable")
        return 1
    dialect = getattr(adapter.client, "dialect", "")
    if not adapter.create_schema(active_slot_index=dialect in PARTIAL_INDEX_DIALECTS):
        return 1
    if settings.seed and not adapter.seed_defaults_if_missing():
        return 1
    print("Durable store initialised")
    return 0


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MediConnect record keeper")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("summary", help="Print entity counts and appointment statuses")

    report = subparsers.add_parser("report", help="Write the PDF system report and optional text reports")
    report.add_argument("--output-dir", type=Path, default=None, help="Directory for report files")
    report.add_argument("--start", type=_iso_date, default=None, help="First day of the appointment report")
    report.add_argument("--end", type=_iso_date, default=None, help="Last day of the appointment report")
    report.add_argument("--clinician", default=None, help="Clinician id for a clinician report")

    subparsers.add_parser("init-store", help="Create the durable schema and seed default data")

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "summary"
    return args


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = parse_args(argv)
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    events = build_events(settings)

    if args.command == "init-store":
        return execute_with_logging(args.command, lambda: run_init_store(settings), events)

    repository = build_repository(settings, events)
    if args.command == "report":
        return execute_with_logging(args.command, lambda: run_report(repository, args, settings), events)
    return execute_with_logging(args.command, lambda: run_summary(repository), events)


if __name__ == "__main__":
    sys.exit(main())
