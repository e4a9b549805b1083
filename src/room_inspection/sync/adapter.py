"""Reconcile inspection sessions with the shared document store.

Writes go out through ``submit``/``patch_staff``/``delete_*``; reads only come
back through ``subscribe``. A successful write never touches a local history
list: the change becomes visible once the store delivers a snapshot that
contains it, which may happen before or after the write call returns.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, TypeVar

from room_inspection.errors import (
    AuthError,
    PartialDeleteError,
    SyncRejectedError,
    SyncUnavailableError,
    ValidationError,
    ValidationReason,
)
from room_inspection.inspection.session import InspectionSession, summarize, validate_for_submit
from room_inspection.models import STAFF_FIELDS, InspectionRecord, StaffRoster, StaffSlot, month_key_for
from room_inspection.store.base import (
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    DocumentStore,
    StoredDocument,
    StoreRejectedError,
    StoreUnavailableError,
    inspections_path,
    settings_path,
    split_doc_path,
    staff_list_path,
)
from room_inspection.store.identity import Identity, IdentityGate
from room_inspection.sync.subscription import Subscription

T = TypeVar("T")

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _created_sort_key(record: InspectionRecord) -> float:
    created = record.created_at
    if created is None:
        return 0.0
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return (created - _EPOCH).total_seconds()


def records_from_documents(docs: list[StoredDocument]) -> list[InspectionRecord]:
    """Map a raw snapshot to records, newest first.

    The sort is stable; records without a timestamp count as epoch zero and
    end up last.
    """
    records = []
    for doc in docs:
        try:
            records.append(InspectionRecord.from_document(doc.id, doc.data))
        except (ValueError, TypeError) as exc:
            logger.warning("Skipping malformed inspection %s: %s", doc.id, exc)
    return sorted(records, key=_created_sort_key, reverse=True)


def record_fields(session: InspectionSession) -> dict[str, Any]:
    summary = summarize(session)
    return {
        "roomId": session.room_id.strip(),
        "inspector": session.inspector_name.strip(),
        "bedStaff": session.bed_staff_name.strip(),
        "waterStaff": session.water_staff_name.strip(),
        "issues": [entry.to_document() for entry in session.entries],
        "issueCount": summary.issue_count,
        "hasGradeA": summary.has_severe,
    }


class SyncAdapter:
    def __init__(
        self,
        store: DocumentStore,
        gate: IdentityGate,
        *,
        app_id: str,
        delete_passphrase: str,
        timeout_seconds: float = 15.0,
        initial_roster: StaffRoster | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._gate = gate
        self._app_id = app_id
        self._delete_passphrase = delete_passphrase
        self._timeout = timeout_seconds
        self._initial_roster = initial_roster or StaffRoster()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._identity: Identity | None = None
        self._subscriptions: list[tuple[Subscription[Any], Callable[[Subscription[Any]], Callable[[], None]]]] = []
        self._background: set[asyncio.Task[None]] = set()
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def inspections_path(self) -> str:
        return inspections_path(self._app_id)

    async def connect(self) -> Identity | None:
        """Establish the identity gate; on failure stay in local-only mode."""
        try:
            identity = await asyncio.wait_for(self._gate.establish_session(), self._timeout)
        except (AuthError, asyncio.TimeoutError) as exc:
            self._logger.warning("Identity gate unavailable, writes disabled: %s", exc)
            self._identity = None
            return None
        self._identity = identity
        for subscription, start in list(self._subscriptions):
            subscription.bind(start(subscription))
        return identity

    def _require_identity(self) -> None:
        if self._identity is None:
            raise SyncUnavailableError("No identity session established")

    async def _call(self, action: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, self._timeout)
        except asyncio.TimeoutError as exc:
            self._logger.warning("%s timed out after %.1fs", action, self._timeout)
            raise SyncUnavailableError(f"{action} timed out") from exc
        except StoreUnavailableError as exc:
            self._logger.warning("%s failed, store unavailable: %s", action, exc)
            raise SyncUnavailableError(str(exc)) from exc
        except StoreRejectedError as exc:
            self._logger.warning("%s rejected by store: %s", action, exc)
            raise SyncRejectedError(str(exc)) from exc

    def _doc_path(self, record_id: str) -> str:
        return f"{self.inspections_path}/{record_id}"

    async def submit(self, session: InspectionSession) -> str:
        """Create a new record, or replace the one the session was loaded from."""
        validate_for_submit(session)
        self._require_identity()
        fields = record_fields(session)

        if session.record_id is not None:
            # Whole-record replace; createdAt stays as first written.
            fields["monthKey"] = session.month_key or month_key_for(self._clock())
            await self._call("submit", self._store.update(self._doc_path(session.record_id), fields))
            self._logger.info("Updated inspection %s for room %s", session.record_id, fields["roomId"])
            return session.record_id

        fields["createdAt"] = SERVER_TIMESTAMP
        fields["monthKey"] = month_key_for(self._clock())
        record_id = await self._call("submit", self._store.create(self.inspections_path, fields))
        self._logger.info(
            "Created inspection %s for room %s (%d issues)", record_id, fields["roomId"], fields["issueCount"]
        )
        return record_id

    async def patch_staff(self, record_id: str, slot: StaffSlot, name: str) -> None:
        self._require_identity()
        await self._call("patch_staff", self._store.update(self._doc_path(record_id), {STAFF_FIELDS[slot]: name.strip()}))

    def _register(
        self,
        subscription: Subscription[Any],
        start: Callable[[Subscription[Any]], Callable[[], None]],
    ) -> None:
        self._subscriptions.append((subscription, start))
        if self._identity is not None:
            subscription.bind(start(subscription))

    def _forget(self, subscription: Subscription[Any]) -> None:
        self._subscriptions = [(sub, start) for sub, start in self._subscriptions if sub is not subscription]

    def subscribe(
        self, on_snapshot: Callable[[list[InspectionRecord]], None] | None = None
    ) -> Subscription[list[InspectionRecord]]:
        """Live history feed; each delivery is the full record list, newest first."""
        subscription: Subscription[list[InspectionRecord]] = Subscription(on_snapshot, on_cancel=self._forget)

        def start(sub: Subscription[list[InspectionRecord]]) -> Callable[[], None]:
            return self._store.subscribe(
                self.inspections_path, lambda docs: sub.publish(records_from_documents(docs))
            )

        self._register(subscription, start)
        return subscription

    def confirm_passphrase(self, passphrase: str) -> None:
        # Client-side deterrent against accidental wipes only; the store's
        # own rules are what actually guard the data.
        if passphrase != self._delete_passphrase:
            raise ValidationError(ValidationReason.WRONG_PASSPHRASE, "Passphrase does not match")

    async def delete_one(self, record_id: str, passphrase: str) -> None:
        self.confirm_passphrase(passphrase)
        self._require_identity()
        await self._call("delete", self._store.delete(self._doc_path(record_id)))
        self._logger.info("Deleted inspection %s", record_id)

    async def delete_all(self, passphrase: str) -> int:
        self.confirm_passphrase(passphrase)
        self._require_identity()
        docs = await self._call("delete_all", self._store.list_once(self.inspections_path))
        deleted = 0
        for doc in docs:
            try:
                await self._call("delete_all", self._store.delete(self._doc_path(doc.id)))
            except (SyncUnavailableError, SyncRejectedError) as exc:
                self._logger.error("Bulk delete stopped after %d of %d inspections", deleted, len(docs))
                raise PartialDeleteError(
                    deleted, len(docs), f"Deleted {deleted} of {len(docs)} inspections: {exc}"
                ) from exc
            deleted += 1
        self._logger.info("Deleted %d inspections", deleted)
        return deleted

    def subscribe_roster(self, on_roster: Callable[[StaffRoster], None] | None = None) -> Subscription[StaffRoster]:
        subscription: Subscription[StaffRoster] = Subscription(on_roster, on_cancel=self._forget)
        _, roster_id = split_doc_path(staff_list_path(self._app_id))

        def on_change(docs: list[StoredDocument]) -> None:
            for doc in docs:
                if doc.id == roster_id:
                    subscription.publish(StaffRoster.from_document(doc.data))
                    return
            self._spawn(self._seed_roster())

        def start(sub: Subscription[StaffRoster]) -> Callable[[], None]:
            return self._store.subscribe(settings_path(self._app_id), on_change)

        self._register(subscription, start)
        return subscription

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _seed_roster(self) -> None:
        try:
            await self._call("seed_roster", self._store.set(staff_list_path(self._app_id), self._initial_roster.to_document()))
        except (SyncUnavailableError, SyncRejectedError) as exc:
            self._logger.warning("Could not seed staff roster: %s", exc)

    async def add_staff(self, name: str, slot: StaffSlot | None = None) -> None:
        """Add a name to one crew list, or both when slot is None."""
        name = name.strip()
        if not name:
            raise ValidationError(ValidationReason.EMPTY_STAFF_NAME, "Staff name is required")
        self._require_identity()
        updates: dict[str, Any] = {}
        if slot in (None, StaffSlot.BED):
            updates["bed"] = ArrayUnion((name,))
        if slot in (None, StaffSlot.WATER):
            updates["water"] = ArrayUnion((name,))
        await self._write_roster(updates, lambda roster: roster.add(name, slot))

    async def remove_staff(self, name: str) -> None:
        self._require_identity()
        await self._write_roster(
            {"bed": ArrayRemove((name,)), "water": ArrayRemove((name,))},
            lambda roster: roster.remove(name),
        )

    async def _write_roster(self, updates: dict[str, Any], apply: Callable[[StaffRoster], None]) -> None:
        path = staff_list_path(self._app_id)
        try:
            await self._call("update_roster", self._store.update(path, updates))
        except SyncRejectedError:
            if await self._call("get_roster", self._store.get(path)) is not None:
                raise
            # Roster document not created yet: start from the seed list.
            roster = StaffRoster.from_document(self._initial_roster.to_document())
            apply(roster)
            await self._call("update_roster", self._store.set(path, roster.to_document()))

    def close(self) -> None:
        for subscription, _ in list(self._subscriptions):
            subscription.cancel()
        for task in list(self._background):
            task.cancel()
