"""Customer identity table used for display joins.

Rows are owned by the customer-facing signup flow; the admin console only
reads them to decorate orders with a name, e-mail and phone.  ``id`` is the
identity-provider user id, the same value stored in ``Order.user_id``.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class CustomerProfile(BaseModel):
    full_name = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(max_length=254, blank=True, default="")
    phone = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        db_table = "customer_profiles"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.full_name or str(self.id)
