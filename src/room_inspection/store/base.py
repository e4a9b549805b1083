"""Document store capability used by the sync adapter.

Paths are slash separated, Firestore style: collections at odd depths,
documents at even depths. Everything lives under
``artifacts/<app_id>/public/data`` so every deployment of the app shares one
namespace.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


# Replaced by the store with its own write time.
SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class ArrayUnion:
    """Add values to an array field, skipping ones already present."""

    values: tuple[Any, ...]


@dataclass(frozen=True)
class ArrayRemove:
    values: tuple[Any, ...]


class StoreError(Exception):
    pass


class StoreUnavailableError(StoreError):
    pass


class StoreRejectedError(StoreError):
    pass


@dataclass(frozen=True)
class StoredDocument:
    id: str
    data: dict[str, Any]


OnChange = Callable[[list[StoredDocument]], None]
Unsubscribe = Callable[[], None]


class DocumentStore(Protocol):
    """Interface for replicated document stores."""

    async def create(self, collection_path: str, doc: dict[str, Any]) -> str: ...
    async def update(self, doc_path: str, fields: dict[str, Any]) -> None: ...
    async def set(self, doc_path: str, doc: dict[str, Any]) -> None: ...
    async def get(self, doc_path: str) -> dict[str, Any] | None: ...
    async def delete(self, doc_path: str) -> None: ...
    async def list_once(self, collection_path: str) -> list[StoredDocument]: ...
    def subscribe(self, collection_path: str, on_change: OnChange) -> Unsubscribe: ...
    def close(self) -> None: ...


def data_root(app_id: str) -> str:
    return f"artifacts/{app_id}/public/data"


def inspections_path(app_id: str) -> str:
    return f"{data_root(app_id)}/inspections"


def settings_path(app_id: str) -> str:
    return f"{data_root(app_id)}/settings"


def staff_list_path(app_id: str) -> str:
    return f"{settings_path(app_id)}/staff_list"


def split_doc_path(doc_path: str) -> tuple[str, str]:
    collection_path, _, doc_id = doc_path.rpartition("/")
    if not collection_path or not doc_id:
        raise ValueError(f"Not a document path: {doc_path}")
    return collection_path, doc_id
