#!/usr/bin/env python3
"""
Result Store Tests

Covers the line grammar, deduplication, ordering and the failure
behaviour of the on-disk hit accumulator.
"""

import asyncio
import os
import sys
import tempfile
import unittest
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from grouphunt.scan_core.exceptions import PersistenceError
from grouphunt.scan_core.result_store import (
    ResultStore, parse_result_lines, sort_balances, render_result_lines
)


class TestResultLines(unittest.TestCase):
    """Test parsing and rendering of result lines"""

    def test_parse_valid_lines(self):
        """Valid lines become id -> balance pairs"""
        lines = ["Group 1234 has 500 robux.", "Group 42 has 50 robux."]
        self.assertEqual(parse_result_lines(lines), {1234: 500, 42: 50})

    def test_parse_drops_malformed_lines(self):
        """Lines outside the grammar are silently dropped"""
        lines = [
            "Group 1 has 10 robux.",
            "garbage",
            "Group x has 5 robux.",
            "Group 2 has -3 robux.",
            "Group 3 has 7 robux",
            "",
        ]
        self.assertEqual(parse_result_lines(lines), {1: 10})

    def test_sort_balance_descending_then_id(self):
        """Higher balances first; equal balances by ascending id"""
        balances = {7: 100, 3: 100, 9: 500, 1: 5}
        self.assertEqual(sort_balances(balances), [(9, 500), (3, 100), (7, 100), (1, 5)])

    def test_render_has_no_trailing_newline(self):
        content = render_result_lines([(9, 500), (3, 100)])
        self.assertEqual(content, "Group 9 has 500 robux.\nGroup 3 has 100 robux.")


class TestResultStore(unittest.TestCase):
    """Test the async ResultStore"""

    def setUp(self):
        """Set up a temporary results file"""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = Path(self.temp_dir.name) / "robux.txt"
        self.store = ResultStore(self.path)

    def tearDown(self):
        self.temp_dir.cleanup()

    def read_file(self) -> str:
        return self.path.read_text(encoding='utf-8')

    def test_record_creates_file(self):
        """The first hit creates the file with a single line"""
        asyncio.run(self.store.record(42, 50))
        self.assertEqual(self.read_file(), "Group 42 has 50 robux.")

    def test_record_sorts_entries(self):
        """The file stays sorted after every write"""
        async def record_all():
            await self.store.record(1, 10)
            await self.store.record(2, 300)
            await self.store.record(3, 10)

        asyncio.run(record_all())
        self.assertEqual(
            self.read_file(),
            "Group 2 has 300 robux.\nGroup 1 has 10 robux.\nGroup 3 has 10 robux.",
        )

    def test_record_overwrites_existing_id(self):
        """A repeated id keeps only the latest balance"""
        async def record_twice():
            await self.store.record(5, 100)
            return await self.store.record(5, 20)

        entries = asyncio.run(record_twice())
        self.assertEqual(entries, [(5, 20)])
        self.assertEqual(self.read_file(), "Group 5 has 20 robux.")

    def test_record_is_idempotent(self):
        """Recording the same pair twice leaves identical content"""
        asyncio.run(self.store.record(8, 80))
        first = self.read_file()
        asyncio.run(self.store.record(8, 80))
        self.assertEqual(self.read_file(), first)

    def test_record_drops_bad_lines_from_existing_file(self):
        """Pre-existing malformed lines disappear on the next write"""
        self.path.write_text("Group 1 has 10 robux.\nnot a result\nGroup 2 has 20 robux.\n",
                             encoding='utf-8')
        asyncio.run(self.store.record(3, 30))
        self.assertEqual(
            self.read_file(),
            "Group 3 has 30 robux.\nGroup 2 has 20 robux.\nGroup 1 has 10 robux.",
        )

    def test_concurrent_records_are_all_kept(self):
        """Concurrent writers sharing the store never lose an update"""
        async def record_many():
            await asyncio.gather(*(self.store.record(i, i * 10) for i in range(1, 21)))

        asyncio.run(record_many())
        self.assertEqual(len(self.store), 20)
        self.assertEqual(self.store.entries()[0], (20, 200))

    def test_load_round_trip(self):
        """Synchronous readers see what the async writer stored"""
        asyncio.run(self.store.record(11, 1100))
        self.assertEqual(self.store.load(), {11: 1100})
        self.assertEqual(self.store.entries(), [(11, 1100)])

    def test_load_missing_file(self):
        self.assertEqual(self.store.load(), {})
        self.assertEqual(len(self.store), 0)

    def test_no_temp_file_left_behind(self):
        asyncio.run(self.store.record(1, 1))
        self.assertFalse(self.store.temp_path.exists())

    def test_write_failure_raises_persistence_error(self):
        """An unwritable location surfaces as PersistenceError"""
        store = ResultStore(os.path.join(self.temp_dir.name, "missing", "robux.txt"))
        with self.assertRaises(PersistenceError):
            asyncio.run(store.record(1, 10))


if __name__ == "__main__":
    unittest.main()
