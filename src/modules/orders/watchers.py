"""Per-session order watchers.

An ``OrderSnapshotWatcher`` keeps one admin session's dashboard fresh: it
subscribes to the change feed and, on every insert or update, re-fetches the
orders and recomputes the stats through ``OrderQueryService``.  Nothing is
patched incrementally, so a duplicated event only costs an extra read.

The watcher owns its subscription and must be closed when the viewing
session ends::

    with OrderSnapshotWatcher(service, credential) as watcher:
        ...
        watcher.snapshot.stats
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

import structlog
from django.utils import timezone

from modules.core.exceptions import Forbidden, Unauthenticated
from modules.orders.dtos import DashboardStats, OrderListQuery, OrderOutputDTO
from modules.orders.feed import ChangeFeed, OrderChanged, change_feed

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderSnapshot:
    stats: DashboardStats
    orders: List[OrderOutputDTO]
    refreshed_at: datetime


class OrderSnapshotWatcher:
    """Re-fetches orders and stats whenever the change feed reports a write."""

    def __init__(
        self,
        service,
        credential: Optional[str],
        feed: ChangeFeed = change_feed,
        query: Optional[OrderListQuery] = None,
        on_refresh: Optional[Callable[[OrderSnapshot], None]] = None,
    ) -> None:
        self._service = service
        self._credential = credential
        self._feed = feed
        self._query = query
        self._on_refresh = on_refresh
        self._lock = threading.Lock()
        self._token: Optional[UUID] = None
        self._snapshot: Optional[OrderSnapshot] = None
        self._closed = False

    @property
    def snapshot(self) -> Optional[OrderSnapshot]:
        return self._snapshot

    @property
    def active(self) -> bool:
        return self._token is not None

    def start(self) -> OrderSnapshotWatcher:
        """Subscribe to the feed and take the first snapshot."""
        if self._closed:
            raise RuntimeError("Watcher is closed.")
        if self._token is None:
            self._token = self._feed.subscribe(
                on_insert=self._on_change, on_update=self._on_change
            )
        self.refresh()
        return self

    def refresh(self) -> Optional[OrderSnapshot]:
        """Pull a fresh snapshot; keeps the previous one if the pull fails."""
        with self._lock:
            if self._closed:
                return self._snapshot

            orders = self._service.list_orders(self._credential, self._query)
            stats = self._service.get_stats(self._credential)
            error = orders.error or stats.error
            if error is not None:
                logger.warning("order_watcher.refresh_failed", error=error.message)
                if isinstance(error, (Unauthenticated, Forbidden)):
                    # The session lost its rights; stop listening for it.
                    self._unsubscribe()
                return self._snapshot

            self._snapshot = OrderSnapshot(
                stats=stats.value,
                orders=orders.value,
                refreshed_at=timezone.now(),
            )
            snapshot = self._snapshot

        if self._on_refresh is not None:
            self._on_refresh(snapshot)
        return snapshot

    def close(self) -> None:
        """Stop receiving events.  Safe to call more than once."""
        with self._lock:
            self._closed = True
            self._unsubscribe()

    def _unsubscribe(self) -> None:
        token, self._token = self._token, None
        if token is not None:
            self._feed.unsubscribe(token)

    def _on_change(self, event: OrderChanged) -> None:
        logger.debug(
            "order_watcher.change_received",
            order_id=str(event.aggregate_id),
            kind=event.kind.value,
        )
        self.refresh()

    def __enter__(self) -> OrderSnapshotWatcher:
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()
