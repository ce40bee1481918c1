"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that every
domain-specific repository interface extends.  Service-layer code
depends on this abstraction, never on the Django ORM directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base read contract.

    Type parameter ``T`` is the entity managed by the repository
    (e.g. ``Order``, ``CustomerProfile``).  Entities are never deleted by
    the admin console, so the contract has no ``delete``.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key; ``None`` when absent or malformed."""

    @abstractmethod
    def list(self) -> List[T]:
        """List every entity in the repository's default ordering."""
