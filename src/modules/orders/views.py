"""Order API views.

Exposes ``OrderQueryService`` over HTTP.  Views only translate between
HTTP and the service: the bearer credential and raw request values are
passed through untouched so authorization always runs before validation,
and every ``ServiceResult`` failure is rendered as ``{"error": ...}`` with
the error's status code.
"""

from __future__ import annotations

from typing import Any, Dict

from django.conf import settings
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle

from modules.core.views import AdminAPIView
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderQueryService


def build_order_service() -> OrderQueryService:
    return OrderQueryService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
    )


class AdminOrdersView(AdminAPIView):
    """``GET`` lists orders, ``PATCH`` transitions one order's status."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_throttles(self) -> list[BaseThrottle]:
        """Writes and reads are throttled in separate scopes."""
        if self.request is not None and self.request.method == "PATCH":
            self.throttle_scope = "admin_write"
        else:
            self.throttle_scope = "admin_read"
        return super().get_throttles()

    def get(self, request: Request) -> Response:
        """GET /api/admin/orders?status=&search=&limit="""
        filters = {
            key: request.query_params.get(key)
            for key in ("status", "search", "limit")
            if request.query_params.get(key) is not None
        }
        result = self._service.list_orders(self.get_credential(request), filters)
        if not result.ok:
            return self.error_response(result.error)

        orders = [order.model_dump(mode="json") for order in result.value]
        return Response({"orders": orders, "count": len(orders)})

    def patch(self, request: Request) -> Response:
        """PATCH /api/admin/orders with ``{"orderId", "status"}``."""
        body: Dict[str, Any] = request.data if isinstance(request.data, dict) else {}
        result = self._service.update_status(
            self.get_credential(request),
            body.get("orderId"),
            body.get("status"),
        )
        if not result.ok:
            return self.error_response(result.error)
        return Response({"success": True, "data": result.value.model_dump(mode="json")})


class AdminDashboardView(AdminAPIView):
    """Dashboard statistics plus the newest orders."""

    throttle_scope = "admin_read"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get(self, request: Request) -> Response:
        """GET /api/admin/dashboard"""
        result = self._service.get_dashboard(
            self.get_credential(request), settings.RECENT_ORDERS_LIMIT
        )
        if not result.ok:
            return self.error_response(result.error)

        snapshot = result.value
        return Response(
            {
                "success": True,
                "stats": snapshot.stats.model_dump(by_alias=True, mode="json"),
                "recentOrders": [
                    order.model_dump(mode="json") for order in snapshot.recent_orders
                ],
            }
        )
