import json
import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from store import CompositeEventSink, EventJournal, LoggingEventSink


class EventSinkTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.journal_path = Path(self._tmp.name) / "logs" / "events.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_journal_appends_entries(self) -> None:
        journal = EventJournal(self.journal_path)

        journal.emit("appointment.added", appointment_id="APT004")
        journal.emit("repository.cleared")

        entries = json.loads(self.journal_path.read_text(encoding="utf-8"))
        self.assertEqual([e["event"] for e in entries], ["appointment.added", "repository.cleared"])
        self.assertEqual(entries[0]["details"], {"appointment_id": "APT004"})
        self.assertNotIn("details", entries[1])
        self.assertTrue(entries[0]["recorded_at"].endswith("Z"))
        self.assertEqual(journal.entries(), entries)

    def test_corrupted_journal_starts_over(self) -> None:
        self.journal_path.parent.mkdir(parents=True)
        self.journal_path.write_text("{not json", encoding="utf-8")
        journal = EventJournal(self.journal_path)

        journal.emit("store.loaded")

        self.assertEqual([e["event"] for e in journal.entries()], ["store.loaded"])

    def test_logging_sink_raises_level_for_failures(self) -> None:
        sink = LoggingEventSink(logging.getLogger("mediconnect.test"))

        with self.assertLogs("mediconnect.test", level="INFO") as captured:
            sink.emit("store.write_failed", kind="appointment", key="APT001")
            sink.emit("appointment.added")

        self.assertEqual(
            captured.output,
            [
                "WARNING:mediconnect.test:store.write_failed key=APT001 kind=appointment",
                "INFO:mediconnect.test:appointment.added",
            ],
        )

    def test_composite_survives_a_broken_sink(self) -> None:
        broken = MagicMock()
        broken.emit.side_effect = OSError("disk full")
        healthy = MagicMock()
        sink = CompositeEventSink([broken, healthy])

        with self.assertLogs("store.events", level="ERROR"):
            sink.emit("scan.added", scan_id="SCAN1")

        healthy.emit.assert_called_once_with("scan.added", scan_id="SCAN1")


if __name__ == "__main__":
    unittest.main()
