"""Domain bus interfaces for in-process event handling."""

from __future__ import annotations

from typing import Callable, Protocol, Type, TypeVar
from uuid import UUID

from shared.domain.events import DomainEvent

E = TypeVar("E", bound=DomainEvent)

EventHandler = Callable[[E], None]


class IEventBus(Protocol):
    """Event bus interface.

    ``subscribe`` returns an opaque token; ``unsubscribe`` with that token
    stops delivery and is safe to call more than once.
    """

    def publish(self, event: DomainEvent) -> None: ...

    def subscribe(self, event_class: Type[E], handler: EventHandler[E]) -> UUID: ...

    def unsubscribe(self, token: UUID) -> bool: ...
