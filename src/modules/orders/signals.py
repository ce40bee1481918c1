"""Signals feeding committed order inserts/updates into the change feed."""

from __future__ import annotations

from typing import Any, Dict

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from modules.orders.feed import ChangeKind, OrderChanged, change_feed, normalize_for_json
from modules.orders.models import Order


def snapshot_values(instance: Order) -> Dict[str, Any]:
    """Column values of *instance*, JSON-safe."""
    return {
        field.attname: normalize_for_json(getattr(instance, field.attname))
        for field in instance._meta.concrete_fields
    }


@receiver(post_save, sender=Order, dispatch_uid="orders.announce_change")
def _announce_change(sender, instance: Order, created: bool, **kwargs) -> None:
    event = OrderChanged(
        aggregate_id=instance.id,
        kind=ChangeKind.INSERT if created else ChangeKind.UPDATE,
        values=snapshot_values(instance),
    )
    # Only committed rows are announced; rolled-back writes never reach watchers.
    transaction.on_commit(lambda: change_feed.publish(event))
