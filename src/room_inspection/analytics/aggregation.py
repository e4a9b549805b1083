"""Monthly statistics and CSV export over record snapshots."""

from __future__ import annotations

import csv
import io
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterable, Sequence

from room_inspection.models import Grade, InspectionRecord, month_key_for

TOP_DEFECTS_LIMIT = 5
CSV_BOM = "\ufeff"
CSV_HEADERS = ["Date", "Room", "Inspector", "Bed Staff", "Water Staff", "Team", "Title", "Grade", "Note", "Photo"]
PASS_MARK = "PASS"


@dataclass(frozen=True)
class MonthlyStats:
    month_key: str
    inspected_count: int
    total_defects: int
    top_defects: list[tuple[str, int]] = field(default_factory=list)
    failure_rate: float = 0.0
    severe_count: int = 0


def current_month_key(now: datetime | None = None) -> str:
    return month_key_for(now or datetime.now(timezone.utc))


def records_for_month(records: Iterable[InspectionRecord], month_key: str) -> list[InspectionRecord]:
    # Legacy records carry no monthKey and count towards every month.
    return [record for record in records if not record.month_key or record.month_key == month_key]


def top_defects(records: Sequence[InspectionRecord], limit: int = TOP_DEFECTS_LIMIT) -> list[tuple[str, int]]:
    """Most frequent defect titles.

    Counter keeps first-seen order and ``sorted`` is stable, so equal counts
    stay in the order they first appear in ``records``.
    """
    counts: Counter[str] = Counter()
    for record in records:
        for entry in record.entries:
            counts[entry.title] += 1
    return sorted(counts.items(), key=lambda item: -item[1])[:limit]


def monthly_stats(records: Sequence[InspectionRecord], month_key: str) -> MonthlyStats:
    filtered = records_for_month(records, month_key)
    inspected = len(filtered)
    failed = sum(1 for record in filtered if record.issue_count > 0)
    return MonthlyStats(
        month_key=month_key,
        inspected_count=inspected,
        total_defects=sum(record.issue_count for record in filtered),
        top_defects=top_defects(filtered),
        failure_rate=(failed / inspected) if inspected else 0.0,
        severe_count=sum(1 for record in filtered if record.has_severe),
    )


def _record_date(record: InspectionRecord) -> str:
    return record.created_at.date().isoformat() if record.created_at else ""


def csv_rows(records: Iterable[InspectionRecord]) -> list[list[str]]:
    rows: list[list[str]] = []
    for record in records:
        prefix = [
            _record_date(record),
            record.room_id,
            record.inspector_name,
            record.bed_staff_name,
            record.water_staff_name,
        ]
        if not record.entries:
            rows.append([*prefix, PASS_MARK, "", "", "", "no"])
            continue
        for entry in record.entries:
            rows.append(
                [
                    *prefix,
                    entry.team.value,
                    entry.title,
                    entry.grade.value,
                    entry.note,
                    "yes" if entry.photo else "no",
                ]
            )
    return rows


def to_csv(records: Iterable[InspectionRecord]) -> str:
    """Flatten records to CSV text, one row per defect entry.

    The leading byte-order mark makes spreadsheet tools read the file as
    UTF-8; keep it.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(csv_rows(records))
    return CSV_BOM + buffer.getvalue()


def export_filename(prefix: str = "Inspection", today: date | None = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"{prefix}_{today.isoformat()}.csv"


def severity_breakdown(records: Iterable[InspectionRecord]) -> dict[str, int]:
    counts = {grade.value: 0 for grade in Grade}
    for record in records:
        for entry in record.entries:
            counts[entry.grade.value] += 1
    return counts
