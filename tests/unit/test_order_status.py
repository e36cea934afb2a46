"""Tests for the closed OrderStatus value object."""

from __future__ import annotations

import pytest

from order_management.core.errors import InvalidOrderStatusError
from order_management.domain.order_status import VALID_STATUSES, OrderStatus


def test_factories():
    assert str(OrderStatus.as_awaiting_payment()) == "awaiting-payment"
    assert str(OrderStatus.as_paid()) == "paid"


def test_predicates():
    assert OrderStatus.as_paid().is_paid()
    assert not OrderStatus.as_paid().is_awaiting_payment()
    assert OrderStatus.as_awaiting_payment().is_awaiting_payment()


def test_to_paid_always_answers_paid():
    assert OrderStatus.as_awaiting_payment().to_paid() == OrderStatus.as_paid()
    assert OrderStatus.as_paid().to_paid() == OrderStatus.as_paid()


def test_equality_is_structural():
    assert OrderStatus("paid") == OrderStatus.as_paid()
    assert OrderStatus.as_paid() != OrderStatus.as_awaiting_payment()


@pytest.mark.parametrize("value", VALID_STATUSES)
def test_from_string_accepts_known_states(value):
    assert str(OrderStatus.from_string(value)) == value


@pytest.mark.parametrize("value", ["cancelled", "PAID", "", "awaiting_payment"])
def test_unknown_status_fails_loudly(value):
    with pytest.raises(InvalidOrderStatusError) as exc_info:
        OrderStatus.from_string(value)
    message = str(exc_info.value)
    assert f"Invalid status: {value}." in message
    assert "awaiting-payment" in message and "paid" in message
    assert exc_info.value.allowed == VALID_STATUSES
