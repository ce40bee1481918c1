"""Django ORM implementation of the Order repository.

Status writes touch exactly two columns (``order_status``, ``updated_at``)
in one ``UPDATE ... WHERE id = ?`` statement.  There is no version column;
concurrent transitions are serialised with ``select_for_update()`` instead.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.orders.models import Order
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order; ``None`` for non-existent or malformed IDs."""
        try:
            return Order.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self) -> List[Order]:
        """Every order, newest-created first."""
        return list(Order.objects.order_by("-created_at", "-id"))

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        The lock serialises concurrent transitions of the same order so the
        legality check always sees the latest committed stage.  Returns
        ``None`` for non-existent or malformed IDs.
        """
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order = Order(**data)
        order.save()
        logger.info("order.created", order_id=str(order.id))
        return order

    @transaction.atomic
    def write_status(self, order: Order, order_status: str) -> Order:
        order.order_status = order_status
        order.save_fields("order_status")
        logger.info(
            "order.status_written",
            order_id=str(order.id),
            order_status=order_status,
        )
        return order
