from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from modules.orders.models import Order

pytestmark = pytest.mark.integration

URL = "/api/admin/dashboard"


class TestDashboardAPI:
    def test_stats_and_recent_orders(self, admin_client, make_order):
        for days in range(7, 0, -1):
            order = make_order(order_status="pending", total_amount=Decimal("10"))
            Order.objects.filter(id=order.id).update(
                created_at=timezone.now() - timedelta(days=days)
            )
        newest = make_order(order_status="confirmed", status="delivered", total_amount=Decimal("500"))

        response = admin_client.get(URL)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["stats"] == {
            "totalOrders": 8,
            "pendingOrders": 8,
            "acceptedOrders": 1,
            "rejectedOrders": 0,
            "totalRevenue": "500.00",
        }
        assert len(body["recentOrders"]) == 5
        assert body["recentOrders"][0]["id"] == str(newest.id)

    def test_empty_dashboard(self, admin_client):
        body = admin_client.get(URL).json()
        assert body["stats"]["totalOrders"] == 0
        assert body["stats"]["totalRevenue"] == "0.00"
        assert body["recentOrders"] == []

    def test_recent_limit_is_configurable(self, admin_client, make_order, settings):
        settings.RECENT_ORDERS_LIMIT = 2
        for _ in range(4):
            make_order()
        assert len(admin_client.get(URL).json()["recentOrders"]) == 2

    def test_requires_admin(self, api_client, customer_token):
        assert api_client.get(URL).status_code == 401
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {customer_token}")
        assert api_client.get(URL).status_code == 403
