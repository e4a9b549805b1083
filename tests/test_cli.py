"""Tests for the command line tools against the in-memory backend."""
from __future__ import annotations

import contextlib
import io
import tempfile
import unittest
from pathlib import Path

from room_inspection.cli import _run, parse_args
from room_inspection.errors import ValidationError

from support import PASSPHRASE, make_config


class TestParseArgs(unittest.TestCase):
    def test_export(self):
        args = parse_args(["export", "--out", "x.csv"])
        self.assertEqual(args.command, "export")
        self.assertEqual(args.out, Path("x.csv"))

    def test_delete_requires_target(self):
        with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            parse_args(["delete", "--passphrase", "x"])
        args = parse_args(["delete", "--all", "--passphrase", "x"])
        self.assertTrue(args.all)

    def test_seed_staff_defaults(self):
        args = parse_args(["--log-level", "DEBUG", "seed-staff", "staff.csv"])
        self.assertEqual(args.slot, "both")
        self.assertEqual(args.column, "name")
        self.assertEqual(args.log_level, "DEBUG")


class TestRun(unittest.IsolatedAsyncioTestCase):
    async def _run(self, *argv, **config):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = await _run(parse_args(list(argv)), make_config(**config))
        return code, out.getvalue()

    async def test_export_writes_csv(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "export.csv"
            code, output = await self._run("export", "--out", str(path))
            self.assertEqual(code, 0)
            self.assertIn("Exported 0 inspections", output)
            self.assertTrue(path.read_text(encoding="utf-8").startswith("\ufeff\"Date\",\"Room\""))

    async def test_stats(self):
        code, output = await self._run("stats", "--month", "2024-05")
        self.assertEqual(code, 0)
        self.assertIn("Month: 2024-05", output)
        self.assertIn("Rooms inspected: 0", output)

    async def test_seed_staff(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "staff.csv"
            path.write_text("name\nAmy\nBen\n", encoding="utf-8")
            code, output = await self._run("seed-staff", str(path), "--slot", "bed")
        self.assertEqual(code, 0)
        self.assertIn("Added 2 names", output)

    async def test_delete_all(self):
        code, output = await self._run("delete", "--all", "--passphrase", PASSPHRASE)
        self.assertEqual(code, 0)
        self.assertIn("Deleted 0 inspections", output)

    async def test_delete_with_wrong_passphrase(self):
        with self.assertRaises(ValidationError):
            await self._run("delete", "--all", "--passphrase", "wrong")


if __name__ == "__main__":
    unittest.main()
