"""Base abstract model shared by every persisted entity.

``BaseModel`` provides a UUIDv7 primary key (time-ordered, so newest-first
listings stay index friendly) and ``created_at`` / ``updated_at``
bookkeeping.  Django skips ``auto_now`` fields on partial saves, so
``save()`` adds ``updated_at`` to any ``update_fields`` it is given.
"""

from __future__ import annotations

import uuid6
from django.db import models


class BaseModel(models.Model):
    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            fields = list(update_fields)
            if "updated_at" not in fields:
                fields.append("updated_at")
            kwargs["update_fields"] = fields
        super().save(*args, **kwargs)

    def save_fields(self, *fields: str) -> None:
        """Persist only *fields* (and ``updated_at``) in one ``UPDATE``."""
        self.save(update_fields=fields)
