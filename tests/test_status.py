"""Tests for the order status transition table."""

import pytest

from services.order_service.status import (
    ALLOWED_TRANSITIONS,
    OrderStatus,
    can_transition,
    ensure_transition,
)
from shared.errors import InvalidStatusTransitionError


class TestTransitions:
    @pytest.mark.parametrize(
        "current,new",
        [
            ("pending", "confirmed"),
            ("pending", "cancelled"),
            ("confirmed", "processing"),
            ("confirmed", "shipped"),
            ("processing", "shipped"),
            ("shipped", "delivered"),
            ("delivered", "refunded"),
        ],
    )
    def test_allowed(self, current, new):
        assert can_transition(current, new)
        assert ensure_transition(current, new) == OrderStatus(new)

    @pytest.mark.parametrize(
        "current,new",
        [
            ("confirmed", "pending"),
            ("shipped", "cancelled"),
            ("delivered", "shipped"),
            ("cancelled", "confirmed"),
            ("refunded", "delivered"),
            ("pending", "pending"),
        ],
    )
    def test_rejected(self, current, new):
        assert not can_transition(current, new)
        with pytest.raises(InvalidStatusTransitionError):
            ensure_transition(current, new)

    def test_unknown_values(self):
        assert not can_transition("pending", "teleported")
        assert not can_transition("lost", "confirmed")

    def test_accepts_enum_members(self):
        assert ensure_transition("pending", OrderStatus.CONFIRMED) is OrderStatus.CONFIRMED

    def test_error_names_both_statuses(self):
        with pytest.raises(InvalidStatusTransitionError) as exc:
            ensure_transition("delivered", OrderStatus.PENDING)
        assert exc.value.current == "delivered"
        assert exc.value.requested == "pending"

    def test_terminal_states(self):
        assert ALLOWED_TRANSITIONS[OrderStatus.CANCELLED] == frozenset()
        assert ALLOWED_TRANSITIONS[OrderStatus.REFUNDED] == frozenset()

    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(OrderStatus)
