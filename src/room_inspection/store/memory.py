"""In-process document store with live listeners.

Listener callbacks are scheduled on the running event loop instead of being
invoked inline, so a write's completion and the snapshot that reflects it
arrive in no guaranteed order, the same as with a replicated backend.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from room_inspection.store.base import (
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    OnChange,
    StoredDocument,
    StoreError,
    StoreRejectedError,
    Unsubscribe,
    split_doc_path,
)

logger = logging.getLogger(__name__)


@dataclass
class _Listener:
    collection_path: str
    on_change: OnChange
    loop: asyncio.AbstractEventLoop
    active: bool = True


class InMemoryDocumentStore:
    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._listeners: list[_Listener] = []
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        # Raised by every call while set; lets callers simulate outages.
        self.failure: StoreError | None = None

    def _check(self) -> None:
        if self.failure is not None:
            raise self.failure

    def _resolve(self, value: Any, current: Any) -> Any:
        if value is SERVER_TIMESTAMP:
            return self._clock()
        if isinstance(value, ArrayUnion):
            merged = list(current or [])
            merged.extend(v for v in value.values if v not in merged)
            return merged
        if isinstance(value, ArrayRemove):
            return [v for v in (current or []) if v not in value.values]
        return copy.deepcopy(value)

    def _apply(self, existing: dict[str, Any], fields: dict[str, Any]) -> dict[str, Any]:
        updated = dict(existing)
        for key, value in fields.items():
            updated[key] = self._resolve(value, existing.get(key))
        return updated

    async def create(self, collection_path: str, doc: dict[str, Any]) -> str:
        self._check()
        doc_id = uuid.uuid4().hex[:20]
        self._collections.setdefault(collection_path, {})[doc_id] = self._apply({}, doc)
        self._notify(collection_path)
        return doc_id

    async def update(self, doc_path: str, fields: dict[str, Any]) -> None:
        self._check()
        collection_path, doc_id = split_doc_path(doc_path)
        docs = self._collections.get(collection_path, {})
        if doc_id not in docs:
            raise StoreRejectedError(f"No document to update: {doc_path}")
        docs[doc_id] = self._apply(docs[doc_id], fields)
        self._notify(collection_path)

    async def set(self, doc_path: str, doc: dict[str, Any]) -> None:
        self._check()
        collection_path, doc_id = split_doc_path(doc_path)
        self._collections.setdefault(collection_path, {})[doc_id] = self._apply({}, doc)
        self._notify(collection_path)

    async def get(self, doc_path: str) -> dict[str, Any] | None:
        self._check()
        collection_path, doc_id = split_doc_path(doc_path)
        doc = self._collections.get(collection_path, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def delete(self, doc_path: str) -> None:
        self._check()
        collection_path, doc_id = split_doc_path(doc_path)
        if self._collections.get(collection_path, {}).pop(doc_id, None) is not None:
            self._notify(collection_path)

    async def list_once(self, collection_path: str) -> list[StoredDocument]:
        self._check()
        return self._snapshot(collection_path)

    def subscribe(self, collection_path: str, on_change: OnChange) -> Unsubscribe:
        listener = _Listener(collection_path, on_change, asyncio.get_running_loop())
        self._listeners.append(listener)
        listener.loop.call_soon(self._deliver, listener)

        def unsubscribe() -> None:
            listener.active = False
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        for listener in self._listeners:
            listener.active = False
        self._listeners.clear()

    def _snapshot(self, collection_path: str) -> list[StoredDocument]:
        docs = self._collections.get(collection_path, {})
        return [StoredDocument(doc_id, copy.deepcopy(data)) for doc_id, data in docs.items()]

    def _notify(self, collection_path: str) -> None:
        for listener in self._listeners:
            if listener.collection_path == collection_path:
                listener.loop.call_soon(self._deliver, listener)

    def _deliver(self, listener: _Listener) -> None:
        if not listener.active:
            return
        listener.on_change(self._snapshot(listener.collection_path))
