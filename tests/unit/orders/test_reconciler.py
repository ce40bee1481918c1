"""Unit tests for ``StatusReconciler``.

Covers:
- Canonical stage precedence across the two status columns.
- The transition table is total over every (stage, requested) pair.
- Dashboard bucket membership is independent, not a partition.
"""

from __future__ import annotations

import pytest

from modules.orders.constants import TERMINAL_STATES, OrderStatus
from modules.orders.reconciler import StatusReconciler

pytestmark = pytest.mark.unit

ALL_STAGES = [choice.value for choice in OrderStatus]

LEGAL = {
    ("pending", "accepted"),
    ("pending", "rejected"),
    ("confirmed", "accepted"),
    ("confirmed", "rejected"),
    ("accepted", "delivered"),
    ("picked_up", "delivered"),
    ("in_transit", "delivered"),
}


def row(order_status="", status=""):
    return {"order_status": order_status, "status": status}


class TestCanonicalStage:
    def test_single_field(self):
        assert StatusReconciler.canonical_stage(row("confirmed")) == OrderStatus.CONFIRMED

    def test_legacy_field_only(self):
        assert StatusReconciler.canonical_stage(row("", "in_transit")) == OrderStatus.IN_TRANSIT

    def test_most_advanced_value_wins(self):
        assert StatusReconciler.canonical_stage(row("confirmed", "delivered")) == OrderStatus.DELIVERED
        assert StatusReconciler.canonical_stage(row("accepted", "confirmed")) == OrderStatus.ACCEPTED

    def test_cancellation_outranks_progress(self):
        assert StatusReconciler.canonical_stage(row("in_transit", "cancelled")) == OrderStatus.CANCELLED

    def test_completed_reported_as_delivered(self):
        assert StatusReconciler.canonical_stage(row("", "completed")) == OrderStatus.DELIVERED

    def test_unknown_or_missing_values_default_to_pending(self):
        assert StatusReconciler.canonical_stage(row("", "")) == OrderStatus.PENDING
        assert StatusReconciler.canonical_stage(row("shipped", None)) == OrderStatus.PENDING

    def test_case_and_whitespace_are_ignored(self):
        assert StatusReconciler.canonical_stage(row(" Delivered ")) == OrderStatus.DELIVERED

    def test_works_on_model_instances(self, make_order):
        order = make_order(order_status="pending", status="picked_up")
        assert order.stage == OrderStatus.PICKED_UP


class TestTransitionTable:
    @pytest.mark.parametrize("current", ALL_STAGES)
    @pytest.mark.parametrize("requested", ALL_STAGES)
    def test_table_is_total(self, current, requested):
        expected = (current, requested) in LEGAL
        assert StatusReconciler.is_legal_transition(row(current), requested) is expected

    def test_pending_cannot_skip_to_delivered(self):
        assert not StatusReconciler.is_legal_transition(row("pending"), "delivered")

    def test_delivered_cannot_be_rejected(self):
        assert not StatusReconciler.is_legal_transition(row("delivered"), "rejected")

    @pytest.mark.parametrize("requested", [None, "", "shipped", 42])
    def test_unrecognised_targets_are_illegal(self, requested):
        assert not StatusReconciler.is_legal_transition(row("pending"), requested)

    def test_requested_stage_is_case_insensitive(self):
        assert StatusReconciler.is_legal_transition(row("pending"), "ACCEPTED")

    def test_legality_follows_canonical_stage(self):
        # order_status says pending but the legacy column already delivered it.
        assert not StatusReconciler.is_legal_transition(row("pending", "delivered"), "accepted")

    @pytest.mark.parametrize("stage", sorted(TERMINAL_STATES))
    def test_terminal_stages(self, stage):
        assert StatusReconciler.is_terminal(row(stage))

    def test_model_helper_delegates(self, make_order):
        order = make_order(order_status="accepted")
        assert order.can_transition_to("delivered")
        assert not order.can_transition_to("rejected")


class TestBucketMembership:
    def test_pending_by_order_status(self):
        assert StatusReconciler.is_pending(row("pending"))
        assert StatusReconciler.is_pending(row("confirmed"))

    def test_pending_by_legacy_status(self):
        assert StatusReconciler.is_pending(row("", "pending"))

    def test_legacy_confirmed_is_not_pending(self):
        assert not StatusReconciler.is_pending(row("", "confirmed"))

    def test_buckets_are_not_exclusive(self):
        order = row("confirmed", "delivered")
        assert StatusReconciler.is_pending(order)
        assert StatusReconciler.is_accepted(order)

    @pytest.mark.parametrize("value", ["picked_up", "in_transit", "delivered"])
    def test_accepted_in_either_column(self, value):
        assert StatusReconciler.is_accepted(row(value))
        assert StatusReconciler.is_accepted(row("", value))

    def test_rejected_only_counts_cancelled(self):
        assert StatusReconciler.is_rejected(row("", "cancelled"))
        assert not StatusReconciler.is_rejected(row("rejected"))

    def test_revenue_membership(self):
        assert StatusReconciler.counts_as_revenue(row("confirmed"))
        assert StatusReconciler.counts_as_revenue(row("", "delivered"))
        assert not StatusReconciler.counts_as_revenue(row("accepted"))
