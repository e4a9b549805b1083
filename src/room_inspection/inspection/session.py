"""In-progress inspection of one room."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime

from room_inspection.catalog import is_known_room
from room_inspection.errors import ValidationError, ValidationReason
from room_inspection.models import DefectEntry, Grade, InspectionRecord, StaffSlot


@dataclass
class InspectionSession:
    room_id: str = ""
    inspector_name: str = ""
    bed_staff_name: str = ""
    water_staff_name: str = ""
    entries: list[DefectEntry] = field(default_factory=list)
    # Set only when editing a record that already exists in the store.
    record_id: str | None = None
    created_at: datetime | None = None
    month_key: str | None = None

    @property
    def is_edit(self) -> bool:
        return self.record_id is not None


@dataclass(frozen=True)
class SessionSummary:
    issue_count: int
    has_severe: bool


def start_session(
    room_id: str = "",
    inspector_name: str = "",
    bed_staff_name: str = "",
    water_staff_name: str = "",
) -> InspectionSession:
    return InspectionSession(
        room_id=room_id,
        inspector_name=inspector_name,
        bed_staff_name=bed_staff_name,
        water_staff_name=water_staff_name,
    )


def session_from_record(record: InspectionRecord) -> InspectionSession:
    """Open a persisted record for editing. The session holds copies only."""
    return InspectionSession(
        room_id=record.room_id,
        inspector_name=record.inspector_name,
        bed_staff_name=record.bed_staff_name,
        water_staff_name=record.water_staff_name,
        entries=[copy.deepcopy(entry) for entry in record.entries],
        record_id=record.record_id,
        created_at=record.created_at,
        month_key=record.month_key,
    )


def add_entry(session: InspectionSession, entry: DefectEntry) -> None:
    # Same title may repeat: one defect type can show up in several spots.
    if not entry.id or not entry.title.strip():
        raise ValidationError(ValidationReason.EMPTY_TITLE, "Only finalized entries can be added")
    session.entries.append(entry)


def remove_entry(session: InspectionSession, entry_id: str) -> None:
    for index, entry in enumerate(session.entries):
        if entry.id == entry_id:
            del session.entries[index]
            return


def can_submit(session: InspectionSession) -> bool:
    return bool(session.room_id.strip()) and bool(session.inspector_name.strip())


def validate_for_submit(session: InspectionSession) -> None:
    if not session.room_id.strip():
        raise ValidationError(ValidationReason.MISSING_ROOM, "Room number is required")
    if not session.inspector_name.strip():
        raise ValidationError(ValidationReason.MISSING_INSPECTOR, "Inspector name is required")
    if not is_known_room(session.room_id.strip()):
        raise ValidationError(ValidationReason.UNKNOWN_ROOM, f"Unknown room: {session.room_id}")


def missing_staff(session: InspectionSession) -> list[StaffSlot]:
    """Crews not attributed yet; they can be back-filled after submit."""
    missing = []
    if not session.bed_staff_name.strip():
        missing.append(StaffSlot.BED)
    if not session.water_staff_name.strip():
        missing.append(StaffSlot.WATER)
    return missing


def summarize(session: InspectionSession) -> SessionSummary:
    return SessionSummary(
        issue_count=len(session.entries),
        has_severe=any(entry.grade is Grade.A for entry in session.entries),
    )
