"""Django ORM implementation of the customer repository.

Error handling follows the Null Object pattern for single look-ups:
malformed or unknown ids return ``None``.  Database errors propagate so the
caller can decide whether the join is optional.
"""

from __future__ import annotations

import uuid
from typing import Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError

from modules.customers.models import CustomerProfile
from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerDjangoRepository(ICustomerRepository):
    """Concrete customer repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[CustomerProfile]:
        try:
            return CustomerProfile.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self) -> List[CustomerProfile]:
        return list(CustomerProfile.objects.all())

    def get_many(self, ids: Iterable[str]) -> Dict[str, CustomerProfile]:
        valid_ids = {str(value) for value in ids if _is_uuid(value)}
        if not valid_ids:
            return {}
        profiles = CustomerProfile.objects.filter(id__in=valid_ids)
        found = {str(profile.id): profile for profile in profiles}
        logger.debug(
            "customer.bulk_lookup",
            requested=len(valid_ids),
            found=len(found),
        )
        return found


def _is_uuid(value: object) -> bool:
    if isinstance(value, uuid.UUID):
        return True
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True
