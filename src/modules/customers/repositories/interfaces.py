"""Customer repository interface.

Adds the bulk look-up used to join customer display fields onto orders.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import CustomerProfile


class ICustomerRepository(IRepository["CustomerProfile"]):
    """Repository contract for customer identity rows."""

    @abstractmethod
    def get_many(self, ids: Iterable[str]) -> Dict[str, CustomerProfile]:
        """Return the profiles for *ids*, keyed by ``str(id)``.

        Unknown ids are simply absent from the result.
        """
