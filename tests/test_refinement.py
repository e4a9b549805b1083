"""Tests for note refinement and the daily report."""
from __future__ import annotations

import time
import unittest

from room_inspection.ai_client.refinement import RefinementGateway, parse_refinement, report_rows
from room_inspection.ai_client.responses import GeminiBackend
from room_inspection.ai_client.schemas import GRADES, refine_schema
from room_inspection.errors import RefinementError, ValidationError, ValidationReason
from room_inspection.models import Grade, Team
from room_inspection.utils.rate_limit import RateLimiter

from support import entry, record


class FakeClient:
    def __init__(self, refined=None, report="All rooms acceptable.", error=None, delay=0.0):
        self.refined = refined if refined is not None else {"title": "Hair on floor", "note": "Hair under bed", "grade": "A"}
        self.report = report
        self.error = error
        self.delay = delay
        self.notes = []
        self.reports = []

    def refine_note(self, note):
        self.notes.append(note)
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return self.refined

    def daily_report(self, data):
        self.reports.append(data)
        if self.error:
            raise self.error
        return self.report


class TestParseRefinement(unittest.TestCase):
    def test_valid_result(self):
        refinement = parse_refinement({"title": " Dusty lamp ", "note": "Dust on lamp ", "grade": "b"})
        self.assertEqual(refinement.title, "Dusty lamp")
        self.assertEqual(refinement.note, "Dust on lamp")
        self.assertIs(refinement.grade, Grade.B)

    def test_malformed_results(self):
        for result in (
            None,
            "text",
            {"note": "x", "grade": "A"},
            {"title": "  ", "note": "x", "grade": "A"},
            {"title": "t", "note": 3, "grade": "A"},
            {"title": "t", "note": "x", "grade": "F"},
        ):
            with self.subTest(result=result), self.assertRaises(RefinementError):
                parse_refinement(result)


class TestRefinementGateway(unittest.IsolatedAsyncioTestCase):
    async def test_refine_returns_triple(self):
        client = FakeClient()
        gateway = RefinementGateway(client, timeout_seconds=2)
        refinement = await gateway.refine("hair under the bed")
        self.assertEqual(refinement.title, "Hair on floor")
        self.assertIs(refinement.grade, Grade.A)
        self.assertEqual(client.notes, ["hair under the bed"])

    async def test_empty_note_rejected_before_calling_client(self):
        client = FakeClient()
        with self.assertRaises(ValidationError) as ctx:
            await RefinementGateway(client).refine("   ")
        self.assertEqual(ctx.exception.reason, ValidationReason.EMPTY_NOTE)
        self.assertEqual(client.notes, [])

    async def test_client_error_becomes_refinement_error(self):
        gateway = RefinementGateway(FakeClient(error=ConnectionError("offline")))
        with self.assertRaises(RefinementError):
            await gateway.refine("dust")

    async def test_malformed_output_is_refinement_error(self):
        gateway = RefinementGateway(FakeClient(refined={"title": "x"}))
        with self.assertRaises(RefinementError):
            await gateway.refine("dust")

    async def test_timeout(self):
        gateway = RefinementGateway(FakeClient(delay=0.5), timeout_seconds=0.05)
        with self.assertRaises(RefinementError):
            await gateway.refine("dust")

    async def test_without_client(self):
        gateway = RefinementGateway(None)
        self.assertFalse(gateway.available)
        with self.assertRaises(RefinementError):
            await gateway.refine("dust")

    async def test_refine_draft_applies_result(self):
        draft = entry("Custom", Grade.C, team=Team.BED, note="hair under bed", entry_id="e1")
        refined = await RefinementGateway(FakeClient()).refine_draft(draft)
        self.assertEqual(refined.title, "Hair on floor")
        self.assertEqual(refined.note, "Hair under bed")
        self.assertIs(refined.grade, Grade.A)
        self.assertEqual(refined.id, "e1")
        self.assertIs(refined.team, Team.BED)

    async def test_refine_draft_keeps_draft_on_failure(self):
        draft = entry("Custom", Grade.C, note="hair")
        gateway = RefinementGateway(FakeClient(error=RuntimeError("quota")))
        with self.assertLogs("room_inspection.ai_client.refinement", level="WARNING"):
            self.assertIs(await gateway.refine_draft(draft), draft)

    async def test_daily_report(self):
        client = FakeClient()
        records = [record("r1", ["Dust", "Hair"], room_id="201"), record("r2", [], room_id="202")]
        report = await RefinementGateway(client).daily_report(records)

        self.assertEqual(report, "All rooms acceptable.")
        self.assertEqual(client.reports, [[{"room": "201", "issues": "Dust(C), Hair(C)"}, {"room": "202", "issues": "PASS"}]])

    async def test_empty_report_is_error(self):
        with self.assertRaises(RefinementError):
            await RefinementGateway(FakeClient(report="  ")).daily_report([])


class TestReportRows(unittest.TestCase):
    def test_limited_to_most_recent(self):
        records = [record(f"r{i}", room_id=str(201 + i % 10)) for i in range(40)]
        self.assertEqual(len(report_rows(records)), 30)
        self.assertEqual(len(report_rows(records, limit=3)), 3)


class TestSchemas(unittest.TestCase):
    def test_refine_schema_lists_grades(self):
        schema = refine_schema()
        properties = schema["schema"]["properties"]
        self.assertEqual(properties["grade"]["enum"], list(GRADES))
        self.assertEqual(sorted(schema["schema"]["required"]), ["grade", "note", "title"])

    def test_gemini_schema_drops_unsupported_keys(self):
        backend = GeminiBackend.__new__(GeminiBackend)
        cleaned = backend._clean_schema({"type": "object", "additionalProperties": False, "items": [{"minimum": 1}]})
        self.assertEqual(cleaned, {"type": "object", "items": [{}]})


class TestRateLimiter(unittest.TestCase):
    def test_first_call_does_not_wait(self):
        limiter = RateLimiter(1)
        start = time.monotonic()
        limiter.wait()
        self.assertLess(time.monotonic() - start, 0.5)

    def test_rejects_non_positive_rate(self):
        with self.assertRaises(ValueError):
            RateLimiter(0)


if __name__ == "__main__":
    unittest.main()
