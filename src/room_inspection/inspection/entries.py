"""Build defect entries from quick-issue templates or free-form input."""

from __future__ import annotations

import dataclasses
import uuid

from room_inspection.catalog import QuickIssue
from room_inspection.errors import ValidationError, ValidationReason
from room_inspection.models import DefectEntry, Grade, Team
from room_inspection.photos import codec


def generate_entry_id() -> str:
    return uuid.uuid4().hex


def from_template(team: Team, template_label: str, template_grade: Grade) -> DefectEntry:
    return DefectEntry(team=team, title=template_label, grade=template_grade, is_custom=False)


def from_quick_issue(team: Team, issue: QuickIssue) -> DefectEntry:
    return from_template(team, issue.label, issue.grade)


def from_custom(team: Team) -> DefectEntry:
    """Blank draft waiting for the inspector to type a title."""
    return DefectEntry(team=team, title="", grade=Grade.C, is_custom=True)


def finalize(draft: DefectEntry) -> DefectEntry:
    title = draft.title.strip()
    if not title:
        raise ValidationError(ValidationReason.EMPTY_TITLE, "Defect title is required")
    return dataclasses.replace(draft, title=title, id=generate_entry_id())


def attach_photo(
    draft: DefectEntry,
    raw: bytes,
    *,
    max_width: int = codec.MAX_WIDTH,
    quality: int = codec.PHOTO_QUALITY,
) -> DefectEntry:
    photo = codec.compress(raw, max_width=max_width, quality=quality)
    if photo is None:
        return draft
    return dataclasses.replace(draft, photo=photo)
