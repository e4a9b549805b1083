"""Service wiring with an explicit start/stop lifecycle."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path

from room_inspection.ai_client.refinement import RefinementGateway
from room_inspection.ai_client.responses import create_client
from room_inspection.analytics.history import HistoryFeed
from room_inspection.config import AppConfig
from room_inspection.inspection import entries
from room_inspection.io.image_loader import load_photo
from room_inspection.models import DefectEntry
from room_inspection.photos.coords import Point, Size, mark_click
from room_inspection.store.base import DocumentStore
from room_inspection.store.identity import GoogleCredentialsGate, Identity, IdentityGate, LocalIdentityGate
from room_inspection.store.memory import InMemoryDocumentStore
from room_inspection.sync.adapter import SyncAdapter

logger = logging.getLogger(__name__)


def create_store(config: AppConfig) -> tuple[DocumentStore, IdentityGate]:
    if config.store_backend == "memory":
        return InMemoryDocumentStore(), LocalIdentityGate()
    # Imported here so the memory backend works without Google libraries configured.
    from room_inspection.store.firestore import FirestoreDocumentStore

    return FirestoreDocumentStore(project=config.firestore_project), GoogleCredentialsGate(config.firestore_project)


def create_refinement_gateway(config: AppConfig) -> RefinementGateway:
    try:
        client = create_client(config)
    except ValueError as exc:
        logger.warning("AI refinement disabled: %s", exc)
        client = None
    return RefinementGateway(client, timeout_seconds=config.llm_timeout_seconds)


@dataclass
class InspectionServices:
    config: AppConfig
    store: DocumentStore
    adapter: SyncAdapter
    refinement: RefinementGateway
    history: HistoryFeed

    @classmethod
    def build(
        cls,
        config: AppConfig,
        *,
        store: DocumentStore | None = None,
        gate: IdentityGate | None = None,
        refinement: RefinementGateway | None = None,
    ) -> "InspectionServices":
        if store is None or gate is None:
            default_store, default_gate = create_store(config)
            store = store or default_store
            gate = gate or default_gate
        adapter = SyncAdapter(
            store,
            gate,
            app_id=config.app_id,
            delete_passphrase=config.delete_passphrase,
            timeout_seconds=config.store_timeout_seconds,
        )
        return cls(
            config=config,
            store=store,
            adapter=adapter,
            refinement=refinement or create_refinement_gateway(config),
            history=HistoryFeed(adapter),
        )

    def attach_photo(self, draft: DefectEntry, raw: bytes) -> DefectEntry:
        return entries.attach_photo(
            draft, raw, max_width=self.config.photo_max_width, quality=self.config.photo_quality
        )

    def attach_photo_file(self, draft: DefectEntry, path: Path) -> DefectEntry:
        photo = load_photo(path, max_width=self.config.photo_max_width, quality=self.config.photo_quality)
        if photo is None:
            logger.warning("Photo %s could not be decoded, entry kept without it", path)
            return draft
        return dataclasses.replace(draft, photo=photo)

    def mark_photo(self, photo: str, click: Point, display_size: Size) -> str:
        return mark_click(photo, click, display_size, quality=self.config.marker_quality)

    async def start(self) -> Identity | None:
        """Establish identity and begin following the history feed."""
        identity = await self.adapter.connect()
        self.history.start()
        return identity

    async def aclose(self) -> None:
        self.history.stop()
        self.adapter.close()
        self.store.close()
