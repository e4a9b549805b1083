"""Cloud Firestore backend for the document store capability."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, TypeVar

from google.api_core import exceptions as api_exceptions
from google.cloud import firestore

from room_inspection.store.base import (
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    OnChange,
    StoredDocument,
    StoreRejectedError,
    StoreUnavailableError,
    Unsubscribe,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)

_REJECTED = (
    api_exceptions.PermissionDenied,
    api_exceptions.Unauthenticated,
    api_exceptions.NotFound,
    api_exceptions.FailedPrecondition,
    api_exceptions.InvalidArgument,
)


def _convert(value: Any) -> Any:
    if value is SERVER_TIMESTAMP:
        return firestore.SERVER_TIMESTAMP
    if isinstance(value, ArrayUnion):
        return firestore.ArrayUnion(list(value.values))
    if isinstance(value, ArrayRemove):
        return firestore.ArrayRemove(list(value.values))
    return value


def _convert_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: _convert(value) for key, value in fields.items()}


class FirestoreDocumentStore:
    """Wraps the blocking Firestore client; calls run on worker threads."""

    def __init__(self, project: str | None = None, client: firestore.Client | None = None) -> None:
        self._project = project
        self._client = client

    @property
    def client(self) -> firestore.Client:
        # Created on first use; construction never touches the network.
        if self._client is None:
            self._client = firestore.Client(project=self._project)
        return self._client

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except _REJECTED as exc:
            raise StoreRejectedError(str(exc)) from exc
        except (api_exceptions.GoogleAPICallError, api_exceptions.RetryError) as exc:
            raise StoreUnavailableError(str(exc)) from exc

    async def create(self, collection_path: str, doc: dict[str, Any]) -> str:
        ref = self.client.collection(collection_path).document()
        await self._run(ref.set, _convert_fields(doc))
        return ref.id

    async def update(self, doc_path: str, fields: dict[str, Any]) -> None:
        await self._run(self.client.document(doc_path).update, _convert_fields(fields))

    async def set(self, doc_path: str, doc: dict[str, Any]) -> None:
        await self._run(self.client.document(doc_path).set, _convert_fields(doc))

    async def get(self, doc_path: str) -> dict[str, Any] | None:
        snapshot = await self._run(self.client.document(doc_path).get)
        return snapshot.to_dict() if snapshot.exists else None

    async def delete(self, doc_path: str) -> None:
        await self._run(self.client.document(doc_path).delete)

    async def list_once(self, collection_path: str) -> list[StoredDocument]:
        collection = self.client.collection(collection_path)
        docs = await self._run(lambda: list(collection.stream()))
        return [StoredDocument(doc.id, doc.to_dict() or {}) for doc in docs]

    def subscribe(self, collection_path: str, on_change: OnChange) -> Unsubscribe:
        loop = asyncio.get_running_loop()
        state = {"active": True}

        def deliver(docs: list[StoredDocument]) -> None:
            if state["active"]:
                on_change(docs)

        def on_snapshot(col_snapshot, changes, read_time) -> None:
            # Runs on the listener thread; hop back onto the event loop.
            docs = [StoredDocument(doc.id, doc.to_dict() or {}) for doc in col_snapshot]
            if state["active"]:
                loop.call_soon_threadsafe(deliver, docs)

        watch = self.client.collection(collection_path).on_snapshot(on_snapshot)

        def unsubscribe() -> None:
            state["active"] = False
            watch.unsubscribe()

        return unsubscribe

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
