"""Integration test: checkout -> OrderPlaced -> payment -> PaymentConfirmed -> paid.

Runs the two application services over one bus with the relational order
repository, the way the ``demo`` command wires them.
"""

from __future__ import annotations

import pytest

from order_management.application import OrdersService, PaymentsService
from order_management.bus import topics
from order_management.bus.message_bus import IntegrationMessage

from factories import make_address, usd

pytestmark = pytest.mark.integration


@pytest.fixture
def wired(order_repo, memory_carts, pricing, bus):
    orders = OrdersService(order_repo, memory_carts, pricing, bus)
    payments = PaymentsService(bus)
    orders.register()
    payments.register()
    return orders, payments


class TestCheckoutPaymentFlow:
    @pytest.mark.asyncio
    async def test_order_is_paid_end_to_end(self, wired, order_repo, memory_carts, cart, bus):
        orders, payments = wired
        await memory_carts.save(cart)

        order = await orders.checkout(cart.cart_id, make_address())
        await bus.drain()

        request = payments.get_request(str(order.order_id))
        assert request.amount == usd("130.00")

        await payments.confirm(str(order.order_id), "payment-123")
        await bus.drain()

        loaded = await order_repo.find_by_id(order.order_id)
        assert loaded.status.is_paid()
        assert loaded.payment_id == "payment-123"
        assert loaded.total_amount == usd("130.00")
        assert bus.failures == []

    @pytest.mark.asyncio
    async def test_redelivered_confirmation_is_harmless(self, wired, order_repo, memory_carts, cart, bus):
        orders, payments = wired
        await memory_carts.save(cart)

        order = await orders.checkout(cart.cart_id, make_address())
        await bus.drain()
        await payments.confirm(str(order.order_id), "payment-123")
        await bus.drain()
        await payments.confirm(str(order.order_id), "payment-123")
        await bus.drain()

        loaded = await order_repo.find_by_id(order.order_id)
        assert loaded.payment_id == "payment-123"
        assert bus.get_error_counts() == {}

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_block_payment(self, wired, memory_carts, cart, bus):
        orders, payments = wired

        async def broken_audit(message: IntegrationMessage) -> None:
            raise RuntimeError("audit store offline")

        bus.subscribe(topics.ORDER_PLACED, broken_audit)
        await memory_carts.save(cart)

        order = await orders.checkout(cart.cart_id, make_address())
        await bus.drain()

        assert payments.get_request(str(order.order_id)) is not None
        assert bus.get_error_counts() == {topics.ORDER_PLACED: 1}

    @pytest.mark.asyncio
    async def test_repeated_checkout_publishes_once(self, wired, memory_carts, cart, bus):
        orders, _ = wired
        await memory_carts.save(cart)

        first = await orders.checkout(cart.cart_id, make_address())
        second = await orders.checkout(cart.cart_id, make_address())
        await bus.drain()

        assert first.order_id == second.order_id
        assert len(bus.get_history(topics.ORDER_PLACED)) == 1
