"""History view-model driven by the live record subscription."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from room_inspection.analytics.aggregation import MonthlyStats, current_month_key, monthly_stats, to_csv
from room_inspection.models import InspectionRecord
from room_inspection.sync.adapter import SyncAdapter
from room_inspection.sync.subscription import Subscription

logger = logging.getLogger(__name__)


class HistoryFeed:
    """Holds the latest snapshot and the stats derived from it.

    Each snapshot replaces the list wholesale; nothing is patched in place.
    """

    def __init__(self, adapter: SyncAdapter, clock: Callable[[], datetime] | None = None) -> None:
        self._adapter = adapter
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._subscription: Subscription[list[InspectionRecord]] | None = None
        self._listeners: list[Callable[["HistoryFeed"], None]] = []
        self.records: list[InspectionRecord] = []
        self.stats: MonthlyStats = monthly_stats([], current_month_key(self._clock()))
        self.loaded = False

    @property
    def active(self) -> bool:
        return self._subscription is not None and not self._subscription.cancelled

    def add_listener(self, listener: Callable[["HistoryFeed"], None]) -> None:
        self._listeners.append(listener)

    def start(self) -> Subscription[list[InspectionRecord]]:
        if self._subscription is None or self._subscription.cancelled:
            self._subscription = self._adapter.subscribe(self._on_snapshot)
        return self._subscription

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def _on_snapshot(self, records: list[InspectionRecord]) -> None:
        self.records = list(records)
        self.stats = monthly_stats(self.records, current_month_key(self._clock()))
        self.loaded = True
        logger.debug("History snapshot: %d records", len(self.records))
        for listener in self._listeners:
            listener(self)

    def find(self, record_id: str) -> InspectionRecord | None:
        return next((record for record in self.records if record.record_id == record_id), None)

    def stats_for(self, month_key: str) -> MonthlyStats:
        return monthly_stats(self.records, month_key)

    def export_csv(self) -> str:
        return to_csv(self.records)
