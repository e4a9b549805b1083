"""Best-effort note refinement and daily reports through the text oracle.

Nothing here is allowed to block defect entry: every failure is a
RefinementError, and ``refine_draft`` turns that into "keep what the
inspector typed".
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from room_inspection.errors import RefinementError, ValidationError, ValidationReason
from room_inspection.models import DefectEntry, Grade, InspectionRecord

logger = logging.getLogger(__name__)

REPORT_RECORD_LIMIT = 30


@dataclass(frozen=True)
class Refinement:
    title: str
    note: str
    grade: Grade


def parse_refinement(result: Any) -> Refinement:
    if not isinstance(result, dict):
        raise RefinementError(f"Expected an object, got {type(result).__name__}")
    title, note, grade = result.get("title"), result.get("note"), result.get("grade")
    if not isinstance(title, str) or not title.strip():
        raise RefinementError("Refinement has no title")
    if not isinstance(note, str):
        raise RefinementError("Refinement note is not text")
    try:
        parsed_grade = Grade(str(grade).strip().upper())
    except ValueError as exc:
        raise RefinementError(f"Unknown grade: {grade!r}") from exc
    return Refinement(title=title.strip(), note=note.strip(), grade=parsed_grade)


def report_rows(records: Sequence[InspectionRecord], limit: int = REPORT_RECORD_LIMIT) -> list[dict[str, str]]:
    return [
        {
            "room": record.room_id,
            "issues": ", ".join(f"{entry.title}({entry.grade.value})" for entry in record.entries) or "PASS",
        }
        for record in records[:limit]
    ]


class RefinementGateway:
    def __init__(self, client: Any | None, timeout_seconds: float = 30.0) -> None:
        # client is an LLMClient, or None when no oracle is configured.
        self._client = client
        self._timeout = timeout_seconds

    @property
    def available(self) -> bool:
        return self._client is not None

    async def _ask(self, method: str, *args: Any) -> Any:
        if self._client is None:
            raise RefinementError("No text oracle configured")
        try:
            return await asyncio.wait_for(asyncio.to_thread(getattr(self._client, method), *args), self._timeout)
        except asyncio.TimeoutError as exc:
            raise RefinementError(f"Text oracle timed out after {self._timeout:.0f}s") from exc
        except Exception as exc:  # noqa: BLE001 - SDK errors vary by backend
            raise RefinementError(f"Text oracle failed: {exc}") from exc

    async def refine(self, note: str) -> Refinement:
        """Rewrite a rough note into (title, note, grade). One attempt only."""
        if not note.strip():
            raise ValidationError(ValidationReason.EMPTY_NOTE, "Write a note before refining it")
        result = await self._ask("refine_note", note)
        return parse_refinement(result)

    async def refine_draft(self, draft: DefectEntry) -> DefectEntry:
        try:
            refinement = await self.refine(draft.note)
        except RefinementError as exc:
            logger.warning("Refinement unavailable, keeping draft as typed: %s", exc)
            return draft
        return dataclasses.replace(draft, title=refinement.title, note=refinement.note, grade=refinement.grade)

    async def daily_report(self, records: Sequence[InspectionRecord]) -> str:
        report = await self._ask("daily_report", report_rows(records))
        if not isinstance(report, str) or not report.strip():
            raise RefinementError("Empty report")
        return report
