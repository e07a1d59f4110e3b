"""Tests for probe.history -- entries, the JSON file store, and the log."""

import json
import os
import tempfile
import unittest
from unittest import mock

from fakes import MemoryStore

from probe.constants import FAILURE_MARKER
from probe.history import (
    HistoryEntry,
    HistoryLog,
    JsonFileStore,
    format_history_rows,
    sparkline,
)


def _entry(**overrides):
    data = dict(latency=42, download_speed=3.2, upload_speed=1.5, date="2025-01-15T10:30:00+00:00")
    data.update(overrides)
    return HistoryEntry(**data)


class TestHistoryEntry(unittest.TestCase):
    def test_to_dict_uses_storage_keys(self):
        d = _entry().to_dict()
        self.assertEqual(
            d,
            {"latency": 42, "downloadSpeed": 3.2, "uploadSpeed": 1.5,
             "date": "2025-01-15T10:30:00+00:00"},
        )

    def test_from_dict(self):
        e = HistoryEntry.from_dict(
            {"latency": 42, "downloadSpeed": 3.2, "uploadSpeed": "Error", "date": "d"}
        )
        self.assertEqual(e.latency, 42)
        self.assertEqual(e.upload_speed, FAILURE_MARKER)

    def test_from_dict_numeric_strings(self):
        # speeds were historically stored as formatted strings
        e = HistoryEntry.from_dict(
            {"latency": 10, "downloadSpeed": "12.34", "uploadSpeed": "0.50", "date": "d"}
        )
        self.assertAlmostEqual(e.download_speed, 12.34)
        self.assertAlmostEqual(e.upload_speed, 0.5)

    def test_from_dict_missing_metric_is_marker(self):
        e = HistoryEntry.from_dict({"date": "d"})
        self.assertEqual(e.latency, FAILURE_MARKER)

    def test_from_dict_requires_date(self):
        with self.assertRaises(ValueError):
            HistoryEntry.from_dict({"latency": 1})
        with self.assertRaises(ValueError):
            HistoryEntry.from_dict("nonsense")

    def test_frozen(self):
        e = _entry()
        with self.assertRaises(AttributeError):
            e.latency = 1


class TestJsonFileStore(unittest.TestCase):
    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = JsonFileStore(os.path.join(tmpdir, "storage.json"))
            self.assertIsNone(store.get_item("history"))

    def test_set_and_get(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = JsonFileStore(os.path.join(tmpdir, "sub", "storage.json"))
            store.set_item("history", "[]")
            store.set_item("other", "x")
            self.assertEqual(store.get_item("history"), "[]")
            self.assertEqual(store.get_item("other"), "x")
            self.assertEqual(os.listdir(os.path.join(tmpdir, "sub")), ["storage.json"])

    def test_corrupt_file_reads_as_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "storage.json")
            with open(path, "w") as f:
                f.write("NOT JSON")
            self.assertIsNone(JsonFileStore(path).get_item("history"))

    def test_default_path(self):
        with mock.patch("probe.history._storage_path", return_value="/tmp/x.json"):
            self.assertEqual(JsonFileStore().path, "/tmp/x.json")


class TestHistoryLog(unittest.TestCase):
    def test_empty_store(self):
        self.assertEqual(HistoryLog(MemoryStore()).load(), [])

    def test_append_preserves_order(self):
        log = HistoryLog(MemoryStore())
        entries = [_entry(latency=i, date=f"d{i}") for i in range(3)]
        for e in entries:
            self.assertTrue(log.append(e))
        self.assertEqual(log.load(), entries)

    def test_duplicates_kept(self):
        log = HistoryLog(MemoryStore())
        log.append(_entry())
        log.append(_entry())
        self.assertEqual(len(log.load()), 2)

    def test_corrupt_json_is_empty(self):
        store = MemoryStore()
        store.data["history"] = "{{{"
        self.assertEqual(HistoryLog(store).load(), [])

    def test_non_list_is_empty(self):
        store = MemoryStore()
        store.data["history"] = json.dumps({"latency": 1})
        self.assertEqual(HistoryLog(store).load(), [])

    def test_bad_records_skipped(self):
        store = MemoryStore()
        store.data["history"] = json.dumps([
            {"latency": 1, "downloadSpeed": 2, "uploadSpeed": 3, "date": "a"},
            {"latency": 1},
            "junk",
            {"latency": 4, "downloadSpeed": 5, "uploadSpeed": 6, "date": "b"},
        ])
        self.assertEqual([e.date for e in HistoryLog(store).load()], ["a", "b"])

    def test_save_failure_returns_false(self):
        log = HistoryLog(MemoryStore(fail_writes=True))
        with self.assertLogs("probe.history", level="ERROR"):
            self.assertFalse(log.save([_entry()]))

    def test_file_backed_roundtrip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log = HistoryLog(JsonFileStore(os.path.join(tmpdir, "storage.json")))
            log.append(_entry(download_speed=FAILURE_MARKER))
            again = HistoryLog(JsonFileStore(os.path.join(tmpdir, "storage.json")))
            self.assertEqual(again.load(), [_entry(download_speed=FAILURE_MARKER)])

    def test_load_twice_is_identical(self):
        log = HistoryLog(MemoryStore())
        log.append(_entry())
        self.assertEqual(log.load(), log.load())


class TestDisplayHelpers(unittest.TestCase):
    def test_format_rows(self):
        rows = format_history_rows([_entry()])
        self.assertEqual(rows[0]["date"], "2025-01-15 10:30")
        self.assertEqual(rows[0]["latency"], 42)
        self.assertEqual(rows[0]["download"], 3.2)

    def test_format_rows_bad_date(self):
        rows = format_history_rows([_entry(date="not-a-date-at-all")])
        self.assertEqual(rows[0]["date"], "not-a-date-at-al")

    def test_sparkline(self):
        self.assertEqual(sparkline([]), "")
        self.assertEqual(sparkline([1.0, 8.0]), "▁█")
        self.assertEqual(len(sparkline([3.0, 3.0, 3.0])), 3)


if __name__ == "__main__":
    unittest.main()
