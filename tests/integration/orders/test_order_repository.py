from __future__ import annotations

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.integration


class TestOrderDjangoRepository:
    def test_create_and_get(self, customer):
        repo = OrderDjangoRepository()
        order = repo.create(
            {
                "user_id": customer.id,
                "total_amount": Decimal("75.00"),
                "order_status": "pending",
                "items": [{"name": "Kurta ironing", "quantity": 3, "price": "25.00"}],
            }
        )
        fetched = repo.get_by_id(str(order.id))
        assert fetched == order
        assert fetched.items[0]["name"] == "Kurta ironing"
        # UUIDv7 primary keys.
        assert fetched.id.version == 7

    @pytest.mark.parametrize("bad_id", ["not-a-uuid", str(uuid.uuid4())])
    def test_missing_or_malformed_ids(self, bad_id):
        repo = OrderDjangoRepository()
        assert repo.get_by_id(bad_id) is None
        assert repo.get_for_update(bad_id) is None

    def test_list_is_newest_first(self, make_order):
        old = make_order()
        Order.objects.filter(id=old.id).update(created_at=timezone.now() - timedelta(days=1))
        new = make_order()
        assert [o.id for o in OrderDjangoRepository().list()] == [new.id, old.id]

    def test_write_status_touches_only_status_and_timestamp(self, make_order):
        order = make_order(order_status="confirmed", status="pending", payment_status="paid")
        before = Order.objects.filter(id=order.id).values().get()

        OrderDjangoRepository().write_status(order, "accepted")

        after = Order.objects.filter(id=order.id).values().get()
        changed = {key for key in before if before[key] != after[key]}
        assert changed <= {"order_status", "updated_at"}
        assert after["order_status"] == "accepted"
