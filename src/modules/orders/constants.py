"""Order domain constants.

Two status vocabularies coexist on every order row: the legacy ``status``
column and the newer ``order_status`` column.  Both draw from the same set
of values, and neither is authoritative on its own; the canonical
lifecycle stage is derived from both (see ``reconciler.py``).
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    ACCEPTED = "accepted", "Accepted"
    PICKED_UP = "picked_up", "Picked up"
    IN_TRANSIT = "in_transit", "In transit"
    DELIVERED = "delivered", "Delivered"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    REJECTED = "rejected", "Rejected"


class DeliveryType(models.TextChoices):
    PICKUP = "pickup", "Pickup"
    DELIVERY = "delivery", "Delivery"


# Caller-visible transitions.  ``confirmed`` behaves like ``pending`` and
# ``picked_up`` / ``in_transit`` like ``accepted``.
VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.ACCEPTED, OrderStatus.REJECTED},
    OrderStatus.CONFIRMED: {OrderStatus.ACCEPTED, OrderStatus.REJECTED},
    OrderStatus.ACCEPTED: {OrderStatus.DELIVERED},
    OrderStatus.PICKED_UP: {OrderStatus.DELIVERED},
    OrderStatus.IN_TRANSIT: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
    OrderStatus.REJECTED: set(),
}

TERMINAL_STATES: set[str] = {
    OrderStatus.DELIVERED,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
    OrderStatus.REJECTED,
}

# Precedence used to derive the canonical stage when the two columns
# disagree: the most advanced value wins, and an abandoned order
# (cancelled/rejected) outranks every progress value.
STAGE_PRECEDENCE: tuple[str, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.ACCEPTED,
    OrderStatus.PICKED_UP,
    OrderStatus.IN_TRANSIT,
    OrderStatus.DELIVERED,
    OrderStatus.COMPLETED,
    OrderStatus.REJECTED,
    OrderStatus.CANCELLED,
)

# Dashboard bucket membership, tested independently against both columns.
PENDING_ORDER_STATUSES: frozenset[str] = frozenset(
    {OrderStatus.PENDING, OrderStatus.CONFIRMED}
)
PENDING_LEGACY_STATUSES: frozenset[str] = frozenset({OrderStatus.PENDING})
ACCEPTED_STATUSES: frozenset[str] = frozenset(
    {OrderStatus.PICKED_UP, OrderStatus.IN_TRANSIT, OrderStatus.DELIVERED}
)
REJECTED_STATUSES: frozenset[str] = frozenset({OrderStatus.CANCELLED})
# Revenue is recognised at confirmation, not only on delivery.
REVENUE_STATUSES: frozenset[str] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CONFIRMED}
)

UNKNOWN_CUSTOMER_NAME = "Unknown Customer"
UNKNOWN_CUSTOMER_EMAIL = "No email"
UNKNOWN_CUSTOMER_PHONE = "No phone"
