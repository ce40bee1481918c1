"""Order model.

The admin console does not create orders (the customer ordering flow
does) and never deletes them: cancellation is a status value.  The only
mutation performed here is a status transition, written as a single-row
update of ``order_status`` + ``updated_at``.

Both status columns are kept exactly as external writers left them; the
canonical stage is derived on read and never stored.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import DeliveryType, OrderStatus


class Order(BaseModel):
    """Laundry/ironing order placed by a customer.

    ``user_id`` is a weak reference to ``CustomerProfile.id``: there is no
    foreign key, the customer row may be missing and that is normal.

    ``items`` is the ordered list of ``{"name", "quantity", "price"}``
    captured when the order was placed.
    """

    user_id = models.UUIDField(null=True, blank=True, db_index=True)

    # Financial
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    applied_coupon_code = models.CharField(max_length=64, blank=True, default="")

    # Status (dual vocabulary)
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, blank=True, default=""
    )
    order_status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        blank=True,
        default=OrderStatus.PENDING,
    )

    # Logistics
    pickup_date = models.DateField(null=True, blank=True)
    delivery_date = models.DateField(null=True, blank=True)
    delivery_type = models.CharField(
        max_length=20,
        choices=DeliveryType.choices,
        default=DeliveryType.PICKUP,
    )
    delivery_address = models.TextField(blank=True, default="")
    pickup_slot_display_time = models.CharField(max_length=64, blank=True, default="")
    delivery_slot_display_time = models.CharField(
        max_length=64, blank=True, default=""
    )

    # Payment
    payment_method = models.CharField(max_length=32, blank=True, default="")
    payment_status = models.CharField(max_length=32, blank=True, default="")
    payment_id = models.CharField(max_length=128, blank=True, default="")

    items = models.JSONField(default=list, blank=True)

    # Cancellation audit
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["order_status"], name="orders_order_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    @property
    def stage(self) -> OrderStatus:
        """Canonical lifecycle stage derived from both status columns."""
        from modules.orders.reconciler import StatusReconciler

        return StatusReconciler.canonical_stage(self)

    def can_transition_to(self, new_status: str) -> bool:
        from modules.orders.reconciler import StatusReconciler

        return StatusReconciler.is_legal_transition(self, new_status)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.id} ({self.order_status or self.status or '-'})"
