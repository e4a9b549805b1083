"""Shared fixtures for the test suite."""
from __future__ import annotations

import asyncio
import dataclasses
import io
from datetime import datetime, timedelta, timezone
from typing import Iterable

from PIL import Image

from room_inspection.config import AppConfig
from room_inspection.errors import AuthError
from room_inspection.models import DefectEntry, Grade, InspectionRecord, Team
from room_inspection.photos import codec
from room_inspection.store.identity import Identity

APP_ID = "test-app"
PASSPHRASE = "open-sesame"


def make_config(**overrides) -> AppConfig:
    base = AppConfig(
        app_id=APP_ID,
        store_backend="memory",
        firestore_project=None,
        llm_provider="google",
        openai_api_key=None,
        google_api_key=None,
        openai_model="gpt-4o-mini",
        google_model="gemini-2.0-flash",
        requests_per_minute=60,
        store_timeout_seconds=2.0,
        llm_timeout_seconds=2.0,
        delete_passphrase=PASSPHRASE,
        photo_max_width=800,
        photo_quality=60,
        marker_quality=70,
        export_prefix="Inspection",
        log_level="INFO",
    )
    return dataclasses.replace(base, **overrides)


class TickingClock:
    """Returns a strictly increasing UTC time on every call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(minutes=1)) -> None:
        self.now = start or datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


class FakeGate:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = 0

    async def establish_session(self) -> Identity:
        self.calls += 1
        if self.fail:
            raise AuthError("identity provider offline")
        return Identity(uid="inspector-device", anonymous=True)


async def drain(turns: int = 20) -> None:
    """Let callbacks scheduled on the loop run."""
    for _ in range(turns):
        await asyncio.sleep(0)


def entry(title: str, grade: Grade = Grade.C, team: Team = Team.WATER, note: str = "", entry_id: str = "") -> DefectEntry:
    return DefectEntry(team=team, title=title, grade=grade, note=note, id=entry_id or f"id-{title}")


def record(
    record_id: str,
    titles: Iterable[str] = (),
    *,
    month_key: str | None = "2024-05",
    created_at: datetime | None = None,
    room_id: str = "201",
    grade: Grade = Grade.C,
) -> InspectionRecord:
    entries = tuple(entry(title, grade=grade, entry_id=f"{record_id}-{i}") for i, title in enumerate(titles))
    return InspectionRecord(
        record_id=record_id,
        room_id=room_id,
        inspector_name="Lin",
        entries=entries,
        issue_count=len(entries),
        has_severe=any(e.grade is Grade.A for e in entries),
        month_key=month_key,
        created_at=created_at,
    )


def image_bytes(width: int, height: int, color=(255, 255, 255), fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def white_photo(width: int = 800, height: int = 600) -> str:
    return codec.to_data_url(Image.new("RGB", (width, height), (255, 255, 255)), quality=90)


def is_marker_red(photo: str, x: int, y: int) -> bool:
    r, g, b = codec.decode_data_url(photo).convert("RGB").getpixel((x, y))
    return r > 170 and g < 140 and b < 140

