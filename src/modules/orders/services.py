"""Order query service (admin console use cases).

Composes the authorization gate, the order store, the status reconciler
and the stats aggregator behind three operations: list orders, compute
dashboard statistics and transition an order's status.

Every public operation:
- authorizes the caller's credential first (``admin_required``) and
  short-circuits on failure;
- returns a ``ServiceResult`` instead of raising (``service_boundary``).

Reads are side-effect free, so a caller abandoning a listing leaves the
order store untouched.  A status transition is applied exactly once per
call and is never retried automatically.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Union

import structlog
from django.db import transaction
from pydantic import ValidationError

from modules.core.authorization import AdminGate, AdminPrincipal, admin_required
from modules.core.exceptions import InvalidRequest
from modules.core.results import service_boundary
from modules.orders.dtos import (
    CustomerDisplay,
    DashboardSnapshot,
    DashboardStats,
    OrderListQuery,
    OrderOutputDTO,
    UpdateStatusRequest,
)
from modules.orders.exceptions import IllegalTransition, OrderNotFound
from modules.orders.reconciler import StatusReconciler
from modules.orders.stats import StatsAggregator

if TYPE_CHECKING:
    from modules.customers.models import CustomerProfile
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

ListFilter = Union[OrderListQuery, Mapping[str, Any], None]


class OrderQueryService:
    """Application service for the admin order console.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
        gate: Optional[AdminGate] = None,
        aggregator: Optional[StatsAggregator] = None,
        reconciler: type[StatusReconciler] = StatusReconciler,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository
        self._gate = gate or AdminGate()
        self._aggregator = aggregator or StatsAggregator(reconciler)
        self._reconciler = reconciler

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @service_boundary("order.list")
    @admin_required
    def list_orders(
        self, principal: AdminPrincipal, filters: ListFilter = None
    ) -> List[OrderOutputDTO]:
        """Orders newest-created first, joined with customer display fields.

        ``filters`` may be an ``OrderListQuery`` or the raw query mapping.
        """
        query = self._coerce_query(filters)
        orders = self._order_repo.list()
        if query.status:
            orders = [order for order in orders if self._matches_status(order, query.status)]

        rows = self._with_customers(orders)
        if query.search:
            rows = [row for row in rows if row.matches_search(query.search)]
        if query.limit:
            rows = rows[: query.limit]

        logger.info(
            "order.listed",
            count=len(rows),
            status_filter=query.status,
            searched=bool(query.search),
        )
        return rows

    @service_boundary("order.stats")
    @admin_required
    def get_stats(self, principal: AdminPrincipal) -> DashboardStats:
        return self._aggregator.aggregate(self._order_repo.list())

    @service_boundary("order.dashboard")
    @admin_required
    def get_dashboard(
        self, principal: AdminPrincipal, recent_limit: int = 5
    ) -> DashboardSnapshot:
        """Stats and the ``recent_limit`` newest orders from one read."""
        orders = self._order_repo.list()
        return DashboardSnapshot(
            stats=self._aggregator.aggregate(orders),
            recent_orders=self._with_customers(orders[: max(recent_limit, 0)]),
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @service_boundary("order.update_status")
    @admin_required
    def update_status(
        self, principal: AdminPrincipal, order_id: Any, requested_stage: Any
    ) -> OrderOutputDTO:
        """Move an order to ``requested_stage`` if the lifecycle allows it.

        Raises (reported through the result):
            InvalidRequest: ``order_id`` or ``requested_stage`` missing/malformed.
            OrderNotFound: no order with that id.
            IllegalTransition: the move is not allowed from the current stage.
        """
        if not order_id or not requested_stage:
            raise InvalidRequest("Missing orderId or status")
        try:
            request = UpdateStatusRequest(order_id=order_id, status=requested_stage)
        except ValidationError as exc:
            raise InvalidRequest(_first_error(exc)) from exc

        order = self._transition(request, principal)
        # The customer join runs after commit so a join failure cannot
        # abort the status write.
        return self._with_customers([order])[0]

    @transaction.atomic
    def _transition(self, request: UpdateStatusRequest, principal: AdminPrincipal) -> Order:
        order = self._order_repo.get_for_update(str(request.order_id))
        if order is None:
            raise OrderNotFound(f"Order {request.order_id} not found.")

        current = self._reconciler.canonical_stage(order)
        log = logger.bind(
            order_id=str(order.id),
            current_stage=current.value,
            requested_stage=request.status,
            admin_id=principal.user_id,
        )

        if not self._reconciler.is_legal_transition(order, request.status):
            log.warning("order.illegal_transition")
            raise IllegalTransition(
                f"Cannot transition order from {current.value} to {request.status}."
            )

        order = self._order_repo.write_status(order, request.status)
        log.info("order.status_updated")
        return order

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce_query(filters: ListFilter) -> OrderListQuery:
        if filters is None:
            return OrderListQuery()
        if isinstance(filters, OrderListQuery):
            return filters
        try:
            return OrderListQuery.model_validate(dict(filters))
        except ValidationError as exc:
            raise InvalidRequest(_first_error(exc)) from exc

    def _matches_status(self, order: Order, status: str) -> bool:
        wanted = status.lower()
        order_status, legacy = self._reconciler.raw_statuses(order)
        return wanted in (
            order_status,
            legacy,
            self._reconciler.canonical_stage(order).value,
        )

    def _with_customers(self, orders: Iterable[Order]) -> List[OrderOutputDTO]:
        orders = list(orders)
        profiles = self._lookup_customers(
            {str(order.user_id) for order in orders if order.user_id}
        )
        return [
            OrderOutputDTO.from_entity(
                order,
                CustomerDisplay.from_profile(
                    profiles.get(str(order.user_id)) if order.user_id else None
                ),
            )
            for order in orders
        ]

    def _lookup_customers(self, ids: set[str]) -> Dict[str, CustomerProfile]:
        """Best-effort customer join: on failure every order gets placeholders."""
        if not ids:
            return {}
        try:
            return self._customer_repo.get_many(ids)
        except Exception as exc:
            logger.warning(
                "order.customer_join_failed",
                customer_count=len(ids),
                error=str(exc),
            )
            return {}


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message
