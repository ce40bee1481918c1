"""In-memory event bus implementation."""

from __future__ import annotations

import threading
from typing import Dict, List, Tuple, Type
from uuid import UUID, uuid4

import structlog

from shared.domain.bus import EventHandler, IEventBus
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Simple in-process event bus.

    Handlers run synchronously on the publishing thread, in subscription
    order.  A failing handler is logged and does not prevent delivery to the
    remaining handlers.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[Tuple[UUID, EventHandler]]] = {}
        self._lock = threading.RLock()

    def subscribe(self, event_class: Type[DomainEvent], handler: EventHandler) -> UUID:
        token = uuid4()
        with self._lock:
            self._handlers.setdefault(event_class, []).append((token, handler))
        return token

    def unsubscribe(self, token: UUID) -> bool:
        removed = False
        with self._lock:
            for event_class, handlers in self._handlers.items():
                kept = [entry for entry in handlers if entry[0] != token]
                if len(kept) != len(handlers):
                    self._handlers[event_class] = kept
                    removed = True
        return removed

    def publish(self, event: DomainEvent) -> None:
        with self._lock:
            handlers = list(self._handlers.get(type(event), []))
        for token, handler in handlers:
            # A handler may have been removed by an earlier handler.
            if not self._is_subscribed(type(event), token):
                continue
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "event_bus.handler_failed",
                    event_name=event.event_name,
                    event_id=str(event.event_id),
                )

    def subscriber_count(self, event_class: Type[DomainEvent]) -> int:
        with self._lock:
            return len(self._handlers.get(event_class, []))

    def _is_subscribed(self, event_class: Type[DomainEvent], token: UUID) -> bool:
        with self._lock:
            return any(entry[0] == token for entry in self._handlers.get(event_class, []))
