"""
Unit tests for the cart store.

Storage contract:
- Missing/invalid file -> empty cart (never raises on read)
- {"wlacZtcCartV1": [ {course, section, ...}, ... ]} in a shared storage file
- add() does not reject duplicates; add_if_absent() does
- a failed write raises StorageWriteFailure
"""

import json
import os
import stat
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from coursecart.errors import StorageWriteFailure
from coursecart.model import CourseRecord
from coursecart.storage import JsonFileCartStore, MemoryCartStore, add_if_absent


MATH = CourseRecord(course="MATH 101", term="Fall 2025", section="001", instructor="Smith, J.")
ENGL = CourseRecord(course="ENGL 101", term="Fall 2025", section="010")


class TestJsonFileCartStore(unittest.TestCase):
    def test_load_missing_file_returns_empty(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            store = JsonFileCartStore(Path(d) / "missing.json")
            self.assertEqual(store.list(), [])
            self.assertFalse(store.contains("MATH 101", "001"))

    def test_add_persists_in_insertion_order(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "storage.json"
            JsonFileCartStore(p).add(MATH)
            JsonFileCartStore(p).add(ENGL)

            # a new store on the same file sees both (another "page")
            other = JsonFileCartStore(p)
            self.assertEqual(other.list(), [MATH, ENGL])

            data = json.loads(p.read_text(encoding="utf-8"))
            self.assertIn("wlacZtcCartV1", data)
            self.assertEqual(data["wlacZtcCartV1"][0]["course"], "MATH 101")

    def test_contains_is_exact(self) -> None:
        store = MemoryCartStore()
        store.add(MATH)
        self.assertTrue(store.contains("MATH 101", "001"))
        self.assertFalse(store.contains("math 101", "001"))
        self.assertFalse(store.contains("MATH 101", "002"))

    def test_clear(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "storage.json"
            store = JsonFileCartStore(p)
            store.add(MATH)
            store.clear()
            self.assertEqual(JsonFileCartStore(p).list(), [])

    def test_other_keys_are_kept(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "storage.json"
            p.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")
            JsonFileCartStore(p).add(MATH)
            data = json.loads(p.read_text(encoding="utf-8"))
            self.assertEqual(data["theme"], "dark")

    @unittest.skipIf(os.name == "nt", "POSIX permissions only")
    def test_rewrite_keeps_file_permissions(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "storage.json"
            p.write_text("{}", encoding="utf-8")
            p.chmod(0o644)
            store = JsonFileCartStore(p)
            store.add(MATH)
            store.clear()
            self.assertEqual(stat.S_IMODE(p.stat().st_mode), 0o644)

    def test_corrupt_file_reads_as_empty(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "storage.json"
            p.write_text("{not json", encoding="utf-8")
            store = JsonFileCartStore(p)
            self.assertEqual(store.list(), [])

            # writing over a corrupt file starts a fresh cart
            store.add(ENGL)
            self.assertEqual(store.list(), [ENGL])

    def test_wrong_types_read_as_empty(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "storage.json"
            p.write_text(json.dumps({"wlacZtcCartV1": "oops"}), encoding="utf-8")
            self.assertEqual(JsonFileCartStore(p).list(), [])
            p.write_text(json.dumps([1, 2]), encoding="utf-8")
            self.assertEqual(JsonFileCartStore(p).list(), [])

    def test_legacy_items_default_missing_fields(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "storage.json"
            legacy = [{"course": "HIST 011", "section": "030", "units": None}, "junk"]
            p.write_text(json.dumps({"wlacZtcCartV1": legacy}), encoding="utf-8")
            items = JsonFileCartStore(p).list()
            self.assertEqual(items, [CourseRecord(course="HIST 011", section="030")])
            self.assertEqual(items[0].term, "")

    def test_write_failure_raises_and_keeps_old_state(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "storage.json"
            store = JsonFileCartStore(p)
            store.add(MATH)
            with mock.patch("coursecart.storage.os.replace", side_effect=OSError("disk full")):
                with self.assertRaises(StorageWriteFailure):
                    store.add(ENGL)
            self.assertEqual(store.list(), [MATH])
            self.assertEqual(sorted(x.name for x in Path(d).iterdir()), ["storage.json"])


class TestDedupGuard(unittest.TestCase):
    def test_add_does_not_reject_duplicates(self) -> None:
        store = MemoryCartStore()
        store.add(MATH)
        store.add(MATH)
        self.assertEqual(len(store.list()), 2)

    def test_add_if_absent(self) -> None:
        store = MemoryCartStore()
        self.assertTrue(add_if_absent(store, MATH))
        self.assertTrue(store.contains("MATH 101", "001"))
        self.assertFalse(add_if_absent(store, MATH))
        self.assertTrue(add_if_absent(store, ENGL))
        self.assertTrue(store.contains("ENGL 101", "010"))

        pairs = [i.key for i in store.list()]
        self.assertEqual(len(pairs), len(set(pairs)))

    def test_memory_store_list_is_a_copy(self) -> None:
        store = MemoryCartStore()
        store.add(MATH)
        store.list().clear()
        self.assertEqual(store.list(), [MATH])


if __name__ == "__main__":
    unittest.main()
