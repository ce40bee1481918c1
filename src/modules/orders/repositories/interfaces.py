"""Order repository interface.

Extends ``IRepository[Order]`` with the order store operations the admin
console needs.  The Service Layer depends exclusively on this contract.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for orders.

    ``list`` returns orders newest-created first.  ``write_status`` is the
    only mutation and must be a single atomic row update keyed by id.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Insert an order row (used by seeding and the ordering flow)."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (inside a transaction)."""

    @abstractmethod
    def write_status(self, order: Order, order_status: str) -> Order:
        """Persist *order_status* and a fresh ``updated_at`` for *order*."""
