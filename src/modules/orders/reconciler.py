"""Status reconciliation between the legacy and current status columns.

Known hazard: ``status`` and ``order_status`` are written by different
generations of the ordering flow and are never normalised into one value.
The dashboard buckets below are therefore *independent* membership tests,
and a single order can satisfy more than one of them (for instance
``order_status="confirmed"`` with ``status="delivered"`` is both pending and
accepted).  The counts on the console depend on this; do not turn the tests
into an exclusive partition.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator, Optional

from modules.orders.constants import (
    ACCEPTED_STATUSES,
    PENDING_LEGACY_STATUSES,
    PENDING_ORDER_STATUSES,
    REJECTED_STATUSES,
    REVENUE_STATUSES,
    STAGE_PRECEDENCE,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
)

_RANK = {value: index for index, value in enumerate(STAGE_PRECEDENCE)}


def order_field(order: Any, name: str) -> Any:
    """Read *name* from a model instance or from a raw row mapping."""
    if isinstance(order, Mapping):
        return order.get(name)
    return getattr(order, name, None)


def _normalize(value: Any) -> Optional[str]:
    if not value or not isinstance(value, str):
        return None
    value = value.strip().lower()
    return value if value in _RANK else None


class StatusReconciler:
    """Pure functions over the two raw status fields of an order."""

    @staticmethod
    def raw_statuses(order: Any) -> tuple[Optional[str], Optional[str]]:
        """Return ``(order_status, status)`` normalised; unknown values become ``None``."""
        return (
            _normalize(order_field(order, "order_status")),
            _normalize(order_field(order, "status")),
        )

    @classmethod
    def _values(cls, order: Any) -> Iterator[str]:
        for value in cls.raw_statuses(order):
            if value is not None:
                yield value

    # ------------------------------------------------------------------
    # Canonical stage
    # ------------------------------------------------------------------

    @classmethod
    def canonical_stage(cls, order: Any) -> OrderStatus:
        """Derive the lifecycle stage from both columns.

        The highest-precedence value present wins (see
        ``STAGE_PRECEDENCE``).  ``completed`` is reported as ``delivered``.
        An order with no recognisable status is ``pending``, the initial
        stage.
        """
        values = list(cls._values(order))
        if not values:
            return OrderStatus.PENDING
        winner = max(values, key=_RANK.__getitem__)
        if winner == OrderStatus.COMPLETED:
            return OrderStatus.DELIVERED
        return OrderStatus(winner)

    @classmethod
    def is_terminal(cls, order: Any) -> bool:
        return cls.canonical_stage(order) in TERMINAL_STATES

    @classmethod
    def is_legal_transition(cls, order: Any, requested: Any) -> bool:
        """Return ``True`` when *requested* is a legal next stage for *order*."""
        target = _normalize(requested)
        if target is None:
            return False
        allowed = VALID_TRANSITIONS.get(cls.canonical_stage(order), set())
        return target in allowed

    # ------------------------------------------------------------------
    # Dashboard bucket membership (independent, not exclusive)
    # ------------------------------------------------------------------

    @classmethod
    def is_pending(cls, order: Any) -> bool:
        order_status, status = cls.raw_statuses(order)
        return order_status in PENDING_ORDER_STATUSES or status in PENDING_LEGACY_STATUSES

    @classmethod
    def is_accepted(cls, order: Any) -> bool:
        return any(value in ACCEPTED_STATUSES for value in cls._values(order))

    @classmethod
    def is_rejected(cls, order: Any) -> bool:
        return any(value in REJECTED_STATUSES for value in cls._values(order))

    @classmethod
    def counts_as_revenue(cls, order: Any) -> bool:
        return any(value in REVENUE_STATUSES for value in cls._values(order))
