"""Dashboard statistics derived from the current order set."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

import structlog

from modules.orders.dtos import DashboardStats
from modules.orders.reconciler import StatusReconciler, order_field

logger = structlog.get_logger(__name__)

MINOR_UNITS = 100
_CENT = Decimal("0.01")


def to_minor_units(value: Any) -> int:
    """Convert an amount to integer minor units (cents).

    Missing, non-numeric, non-finite, negative or unrepresentably large
    amounts count as zero.
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite() or amount < 0:
            return 0
        return int(amount.quantize(_CENT, rounding=ROUND_HALF_UP) * MINOR_UNITS)
    except (InvalidOperation, ValueError):
        return 0


def from_minor_units(value: int) -> Decimal:
    return (Decimal(value) / MINOR_UNITS).quantize(_CENT)


class StatsAggregator:
    """Computes ``DashboardStats`` with the reconciler's membership tests."""

    def __init__(self, reconciler: type[StatusReconciler] = StatusReconciler) -> None:
        self._reconciler = reconciler

    def aggregate(self, orders: Iterable[Any]) -> DashboardStats:
        total = pending = accepted = rejected = 0
        revenue_minor = 0
        for order in orders:
            total += 1
            if self._reconciler.is_pending(order):
                pending += 1
            if self._reconciler.is_accepted(order):
                accepted += 1
            if self._reconciler.is_rejected(order):
                rejected += 1
            if self._reconciler.counts_as_revenue(order):
                revenue_minor += to_minor_units(order_field(order, "total_amount"))

        stats = DashboardStats(
            total_orders=total,
            pending_orders=pending,
            accepted_orders=accepted,
            rejected_orders=rejected,
            total_revenue=from_minor_units(revenue_minor),
        )
        logger.debug("order_stats.aggregated", **stats.model_dump())
        return stats
