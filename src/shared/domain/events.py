"""Domain event primitives shared by the bounded contexts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID, uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Immutable record of something that happened to one aggregate."""

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=_utcnow)

    @property
    def event_name(self) -> str:
        return type(self).__name__

    def envelope(self) -> Dict[str, Any]:
        """Identity fields common to every event, JSON-safe."""
        return {
            "event_name": self.event_name,
            "event_id": str(self.event_id),
            "aggregate_id": str(self.aggregate_id),
            "occurred_on": self.occurred_on.isoformat(),
        }
