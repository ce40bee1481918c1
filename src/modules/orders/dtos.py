"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  They are the
contract between the API layer and the service layer and are immutable
(``frozen=True``).  Output DTOs serialise with camelCase aliases where the
console expects them (``DashboardStats``) and with the order table's
column names everywhere else.

- ``OrderListQuery``: optional status / search / limit filter.
- ``UpdateStatusRequest``: body of a status transition request.
- ``DashboardStats``: derived counters and revenue.
- ``CustomerDisplay``: joined customer fields (or placeholders).
- ``OrderOutputDTO``: an order row plus its canonical stage and customer.
- ``DashboardSnapshot``: stats plus the newest orders.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from modules.orders.constants import (
    UNKNOWN_CUSTOMER_EMAIL,
    UNKNOWN_CUSTOMER_NAME,
    UNKNOWN_CUSTOMER_PHONE,
)

if TYPE_CHECKING:
    from modules.customers.models import CustomerProfile
    from modules.orders.models import Order


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class OrderListQuery(BaseModel):
    """Optional filter for order listings.

    ``status`` matches either raw status column or the canonical stage.
    ``search`` is a case-insensitive substring match over customer name,
    e-mail, phone and order id.  ``limit`` keeps the N newest orders.
    """

    model_config = ConfigDict(frozen=True)

    status: Optional[str] = None
    search: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)

    @field_validator("status", "search")
    @classmethod
    def blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class UpdateStatusRequest(BaseModel):
    """Immutable DTO for ``PATCH`` status transitions."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    order_id: UUID = Field(alias="orderId")
    status: str

    @field_validator("status")
    @classmethod
    def status_not_blank(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("Status must not be blank.")
        return v


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class DashboardStats(BaseModel):
    """Dashboard counters; recomputed on demand, never persisted.

    The bucket counts are independent membership tests and need not sum
    to ``total_orders``.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    total_orders: int = 0
    pending_orders: int = 0
    accepted_orders: int = 0
    rejected_orders: int = 0
    total_revenue: Decimal = Decimal("0.00")


class CustomerDisplay(BaseModel):
    """Customer fields shown next to an order."""

    model_config = ConfigDict(frozen=True)

    full_name: str = UNKNOWN_CUSTOMER_NAME
    email: str = UNKNOWN_CUSTOMER_EMAIL
    phone: str = UNKNOWN_CUSTOMER_PHONE
    # Real joined values only; placeholders are never searchable.
    search_terms: Tuple[str, ...] = Field(default=(), exclude=True, repr=False)

    @classmethod
    def from_profile(cls, profile: Optional[CustomerProfile]) -> CustomerDisplay:
        if profile is None:
            return cls()
        return cls(
            full_name=profile.full_name or UNKNOWN_CUSTOMER_NAME,
            email=profile.email or UNKNOWN_CUSTOMER_EMAIL,
            phone=profile.phone or UNKNOWN_CUSTOMER_PHONE,
            search_terms=tuple(
                value for value in (profile.full_name, profile.email, profile.phone) if value
            ),
        )


class OrderItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = ""
    quantity: int = 0
    price: Decimal = Decimal("0")


class OrderOutputDTO(BaseModel):
    """Immutable DTO for order API responses."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    user_id: Optional[UUID]
    total_amount: Optional[Decimal]
    discount_amount: Optional[Decimal]
    applied_coupon_code: str
    status: str
    order_status: str
    stage: str
    pickup_date: Optional[date]
    delivery_date: Optional[date]
    delivery_type: str
    delivery_address: str
    pickup_slot_display_time: str
    delivery_slot_display_time: str
    payment_method: str
    payment_status: str
    payment_id: str
    items: List[OrderItemDTO]
    created_at: datetime
    updated_at: datetime
    cancelled_at: Optional[datetime]
    cancellation_reason: str
    full_name: str
    email: str
    phone: str
    search_terms: Tuple[str, ...] = Field(default=(), exclude=True, repr=False)

    @classmethod
    def from_entity(
        cls, order: Order, customer: Optional[CustomerDisplay] = None
    ) -> OrderOutputDTO:
        customer = customer or CustomerDisplay()
        return cls(
            id=order.id,
            user_id=order.user_id,
            total_amount=order.total_amount,
            discount_amount=order.discount_amount,
            applied_coupon_code=order.applied_coupon_code,
            status=order.status,
            order_status=order.order_status,
            stage=order.stage.value,
            pickup_date=order.pickup_date,
            delivery_date=order.delivery_date,
            delivery_type=order.delivery_type,
            delivery_address=order.delivery_address,
            pickup_slot_display_time=order.pickup_slot_display_time,
            delivery_slot_display_time=order.delivery_slot_display_time,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            payment_id=order.payment_id,
            items=[_item(entry) for entry in (order.items or [])],
            created_at=order.created_at,
            updated_at=order.updated_at,
            cancelled_at=order.cancelled_at,
            cancellation_reason=order.cancellation_reason,
            full_name=customer.full_name,
            email=customer.email,
            phone=customer.phone,
            search_terms=customer.search_terms,
        )

    def matches_search(self, term: str) -> bool:
        needle = term.lower()
        haystack = (*self.search_terms, str(self.id))
        return any(needle in value.lower() for value in haystack)


def _item(entry: Any) -> OrderItemDTO:
    if not isinstance(entry, dict):
        return OrderItemDTO()
    try:
        return OrderItemDTO.model_validate(entry)
    except ValidationError:
        # Legacy rows may carry malformed line items; keep the row readable.
        return OrderItemDTO(name=str(entry.get("name") or ""))


class DashboardSnapshot(BaseModel):
    """Dashboard payload: statistics plus the newest orders."""

    model_config = ConfigDict(frozen=True)

    stats: DashboardStats
    recent_orders: List[OrderOutputDTO]
