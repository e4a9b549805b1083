"""Data model for inspections, defect entries and the staff roster."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import Any, Iterable

import icu


class Team(str, Enum):
    WATER = "water"
    BED = "bed"


class Grade(str, Enum):
    A = "A"  # fail / severe
    B = "B"  # moderate point deduction
    C = "C"  # minor


class StaffSlot(str, Enum):
    BED = "bed"
    WATER = "water"


STAFF_FIELDS = {StaffSlot.BED: "bedStaff", StaffSlot.WATER: "waterStaff"}


@dataclass(frozen=True)
class DefectEntry:
    team: Team
    title: str
    grade: Grade
    note: str = ""
    photo: str | None = None
    is_custom: bool = False
    id: str = ""

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "team": self.team.value,
            "title": self.title,
            "grade": self.grade.value,
            "note": self.note,
            "photo": self.photo,
            "isCustom": self.is_custom,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "DefectEntry":
        grade = doc.get("grade") or Grade.C.value
        return cls(
            id=str(doc.get("id", "")),
            team=Team(doc.get("team") or Team.WATER.value),
            title=doc.get("title") or "",
            grade=Grade(grade),
            note=doc.get("note") or "",
            photo=doc.get("photo") or None,
            is_custom=bool(doc.get("isCustom", False)),
        )


@dataclass(frozen=True)
class InspectionRecord:
    """Read-only projection of a persisted inspection."""

    record_id: str
    room_id: str
    inspector_name: str
    bed_staff_name: str = ""
    water_staff_name: str = ""
    entries: tuple[DefectEntry, ...] = ()
    issue_count: int = 0
    has_severe: bool = False
    month_key: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_document(cls, record_id: str, doc: dict[str, Any]) -> "InspectionRecord":
        entries = tuple(DefectEntry.from_document(item) for item in doc.get("issues") or [])
        issue_count = doc.get("issueCount")
        has_severe = doc.get("hasGradeA")
        created_at = doc.get("createdAt")
        return cls(
            record_id=record_id,
            room_id=str(doc.get("roomId") or ""),
            inspector_name=doc.get("inspector") or "",
            bed_staff_name=doc.get("bedStaff") or "",
            water_staff_name=doc.get("waterStaff") or "",
            entries=entries,
            issue_count=int(issue_count) if issue_count is not None else len(entries),
            has_severe=bool(has_severe) if has_severe is not None else any(e.grade is Grade.A for e in entries),
            month_key=doc.get("monthKey") or None,
            created_at=created_at if isinstance(created_at, datetime) else None,
        )


# Staff names are Traditional Chinese; zh_TW orders Han characters by stroke count.
COLLATION_LOCALE = "zh_TW"


@lru_cache(maxsize=None)
def _collator(locale_name: str) -> icu.Collator:
    return icu.Collator.createInstance(icu.Locale(locale_name))


def collation_key(name: str, locale_name: str = COLLATION_LOCALE) -> bytes:
    return _collator(locale_name).getSortKey(name)


def sort_names(names: Iterable[str], locale_name: str = COLLATION_LOCALE) -> list[str]:
    unique = {name.strip() for name in names if name and name.strip()}
    return sorted(unique, key=lambda name: collation_key(name, locale_name))


@dataclass
class StaffRoster:
    """Picker contents for the two crews. Not authoritative for validation."""

    bed: list[str] = field(default_factory=list)
    water: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.bed = sort_names(self.bed)
        self.water = sort_names(self.water)

    @classmethod
    def from_document(cls, doc: dict[str, Any] | None) -> "StaffRoster":
        doc = doc or {}
        return cls(bed=list(doc.get("bed") or []), water=list(doc.get("water") or []))

    def to_document(self) -> dict[str, list[str]]:
        return {"bed": list(self.bed), "water": list(self.water)}

    def add(self, name: str, slot: StaffSlot | None = None) -> None:
        """Add a name to one crew, or to both when slot is None."""
        if slot in (None, StaffSlot.BED):
            self.bed = sort_names([*self.bed, name])
        if slot in (None, StaffSlot.WATER):
            self.water = sort_names([*self.water, name])

    def remove(self, name: str) -> None:
        self.bed = [n for n in self.bed if n != name]
        self.water = [n for n in self.water if n != name]

    def names_for(self, slot: StaffSlot | None) -> list[str]:
        if slot is StaffSlot.BED:
            return list(self.bed)
        if slot is StaffSlot.WATER:
            return list(self.water)
        return sort_names([*self.bed, *self.water])


def month_key_for(moment: datetime) -> str:
    """Year-month aggregation window, e.g. ``2024-05``."""
    return moment.strftime("%Y-%m")
