import threading
import unittest
from concurrent.futures import ThreadPoolExecutor

from store.identifiers import IdentifierGenerator, IdKind


class IdentifierGeneratorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.generator = IdentifierGenerator()

    def test_counter_starts_after_existing_size(self) -> None:
        self.assertEqual(
            self.generator.next_id(IdKind.APPOINTMENT, {"APT001", "APT002"}),
            "APT003",
        )

    def test_skips_ids_left_behind_by_deletions(self) -> None:
        # Two entries remain after APT002 was removed; APT003 is still taken.
        existing = {"APT001", "APT003"}

        self.assertEqual(self.generator.next_id(IdKind.APPOINTMENT, existing), "APT004")

    def test_never_reissues_an_id_that_was_not_stored(self) -> None:
        issued = [self.generator.next_id(IdKind.MEDICAL_RECORD, set()) for _ in range(3)]

        self.assertEqual(issued, ["REC001", "REC002", "REC003"])

    def test_shrinking_collection_does_not_bring_back_old_numbers(self) -> None:
        self.assertEqual(self.generator.next_id(IdKind.APPOINTMENT, {"APT001", "APT002"}), "APT003")

        self.assertEqual(self.generator.next_id(IdKind.APPOINTMENT, set()), "APT004")

    def test_only_a_high_water_mark_is_kept_per_kind(self) -> None:
        for _ in range(10_000):
            self.generator.next_id(IdKind.PATIENT, set())
        self.generator.next_id(IdKind.CLINICIAN, {"DOC001"})

        self.assertEqual(self.generator._high_water, {IdKind.PATIENT: 10_000, IdKind.CLINICIAN: 2})
        self.assertFalse(hasattr(self.generator, "_issued"))

    def test_ten_thousand_sequential_ids_are_unique_and_absent(self) -> None:
        existing = {f"APT{n:03d}" for n in range(1, 50, 3)}

        issued = [self.generator.next_id(IdKind.APPOINTMENT, existing) for _ in range(10_000)]

        self.assertEqual(len(set(issued)), 10_000)
        self.assertTrue(existing.isdisjoint(issued))

    def test_ten_thousand_concurrent_ids_are_unique(self) -> None:
        existing = {"PRES001", "PRES002"}
        barrier = threading.Barrier(8)

        def worker() -> list:
            barrier.wait()
            return [self.generator.next_id(IdKind.PRESCRIPTION, existing) for _ in range(1250)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            batches = [future.result() for future in [pool.submit(worker) for _ in range(8)]]

        issued = [identifier for batch in batches for identifier in batch]
        self.assertEqual(len(issued), 10_000)
        self.assertEqual(len(set(issued)), 10_000)
        self.assertTrue(existing.isdisjoint(issued))

    def test_scan_ids_increase_even_when_the_clock_stalls(self) -> None:
        generator = IdentifierGenerator(clock=lambda: 1_700_000_000_000)

        first = generator.next_id(IdKind.SCAN, ())
        second = generator.next_id(IdKind.SCAN, ())

        self.assertEqual(first, "SCAN1700000000000")
        self.assertEqual(second, "SCAN1700000000001")

    def test_each_kind_uses_its_own_prefix(self) -> None:
        for kind in IdKind:
            with self.subTest(kind=kind):
                identifier = self.generator.next_id(kind, set())
                self.assertTrue(identifier.startswith(kind.prefix))
                self.assertTrue(identifier[len(kind.prefix):].isdigit())

    def test_reset_forgets_issued_ids(self) -> None:
        self.generator.next_id(IdKind.APPOINTMENT, set())
        self.generator.next_id(IdKind.APPOINTMENT, set())

        self.generator.reset()

        self.assertEqual(self.generator.next_id(IdKind.APPOINTMENT, set()), "APT001")


if __name__ == "__main__":
    unittest.main()
