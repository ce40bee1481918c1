"""Committed order writes are announced on the change feed.

Covers:
- Inserts and updates produce events carrying the row's values.
- Nothing is announced until the transaction commits.
- Rolled-back writes are never announced.
- Per-row events arrive in commit order.
"""

from __future__ import annotations

import pytest
from django.db import transaction

from modules.orders.feed import ChangeKind, change_feed

pytestmark = pytest.mark.integration


@pytest.fixture()
def received():
    events = []
    token = change_feed.subscribe(on_insert=events.append, on_update=events.append)
    yield events
    change_feed.unsubscribe(token)


class TestChangeFeedSignals:
    def test_insert_announced_after_commit(self, make_order, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            order = make_order(order_status="confirmed")
            assert received == []

        for callback in callbacks:
            callback()

        assert len(received) == 1
        event = received[0]
        assert event.kind is ChangeKind.INSERT
        assert event.aggregate_id == order.id
        assert event.values["order_status"] == "confirmed"
        assert event.values["id"] == str(order.id)

    def test_status_update_via_api_announced(
        self, admin_client, make_order, received, django_capture_on_commit_callbacks
    ):
        order = make_order(order_status="confirmed")

        with django_capture_on_commit_callbacks(execute=True):
            admin_client.patch(
                "/api/admin/orders",
                {"orderId": str(order.id), "status": "accepted"},
                format="json",
            )

        assert [e.kind for e in received] == [ChangeKind.UPDATE]
        assert received[0].values["order_status"] == "accepted"

    def test_rolled_back_write_not_announced(self, make_order, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            try:
                with transaction.atomic():
                    make_order()
                    raise RuntimeError("abort")
            except RuntimeError:
                pass
        assert received == []

    def test_per_row_commit_order(self, make_order, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            order = make_order(order_status="pending")
        with django_capture_on_commit_callbacks(execute=True):
            order.order_status = "accepted"
            order.save(update_fields=["order_status"])
        with django_capture_on_commit_callbacks(execute=True):
            order.order_status = "delivered"
            order.save(update_fields=["order_status"])

        assert [e.values["order_status"] for e in received] == ["pending", "accepted", "delivered"]

    def test_unsubscribed_handler_gets_nothing(self, make_order, django_capture_on_commit_callbacks):
        events = []
        token = change_feed.subscribe(on_insert=events.append)
        change_feed.unsubscribe(token)
        change_feed.unsubscribe(token)

        with django_capture_on_commit_callbacks(execute=True):
            make_order()

        assert events == []
