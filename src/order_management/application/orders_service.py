"""Ordering application service: checkout and payment confirmation.

Each public method is one unit of work: load or build an aggregate,
mutate it, persist it through the repository and publish whatever domain
events it recorded.  Events are published only after the save succeeds.
"""

from __future__ import annotations

import logging

from order_management.bus import topics
from order_management.bus.message_bus import IntegrationMessage, MessageBus
from order_management.core.errors import CartNotFoundError, EmptyCartError, OrderNotFoundError
from order_management.domain.order import Order, OrderItem
from order_management.domain.pricing import PricingGateway
from order_management.domain.repository import OrderRepository, ShoppingCartRepository
from order_management.domain.value_objects import CartId, Money, OrderId, ShippingAddress

from .payments import PaymentConfirmed

logger = logging.getLogger(__name__)


class OrdersService:
    def __init__(
        self,
        orders: OrderRepository,
        carts: ShoppingCartRepository,
        pricing: PricingGateway,
        bus: MessageBus,
    ) -> None:
        self._orders = orders
        self._carts = carts
        self._pricing = pricing
        self._bus = bus

    def register(self, bus: MessageBus | None = None) -> None:
        """Subscribe this service's handlers on *bus* (default: its own bus)."""
        (bus or self._bus).subscribe(topics.PAYMENT_CONFIRMED, self.on_payment_confirmed)

    # -- Commands ----------------------------------------------------------

    async def checkout(self, cart_id: CartId, shipping_address: ShippingAddress) -> Order:
        """Turn a cart into a placed order.

        Idempotent per cart: when an order already exists for *cart_id* it
        is returned unchanged and nothing is saved or published.

        Raises:
            CartNotFoundError: If the cart does not exist.
            EmptyCartError: If the cart has no items.
        """
        existing = await self._orders.find_by_cart_id(cart_id)
        if existing is not None:
            logger.info("Cart %s already checked out as order %s", cart_id, existing.order_id)
            return existing

        cart = await self._carts.find_by_id(cart_id)
        if cart is None:
            raise CartNotFoundError(f"Cart {cart_id} not found")
        if cart.is_empty():
            raise EmptyCartError(f"Cart {cart_id} has no items")

        items = [
            OrderItem.create(
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=self._pricing.get_product_price(line.product_id),
                item_discount=self._pricing.get_product_discount(
                    line.product_id, cart.customer_id, line.quantity
                ),
            )
            for line in cart.items
        ]
        global_discount = self._pricing.get_order_discount(
            cart.customer_id, self._items_total(items)
        )

        order = Order.create(
            cart_id=cart.cart_id,
            customer_id=cart.customer_id,
            items=items,
            shipping_address=shipping_address,
            global_discount=global_discount,
        )
        await self._orders.save(order)

        cart.mark_as_converted()
        await self._carts.save(cart)

        for event in order.pull_events():
            await self._bus.publish(topics.ORDER_PLACED, event)

        return order

    async def confirm_payment(self, order_id: OrderId, payment_id: str) -> Order:
        """Record a successful payment against an order.

        A repeated confirmation with the same *payment_id* is a no-op.  A
        different payment for an already-paid order raises
        :class:`~order_management.core.errors.OrderAlreadyPaidError`.

        Raises:
            OrderNotFoundError: If the order does not exist.
        """
        order = await self._orders.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")

        if order.status.is_paid() and order.payment_id == payment_id:
            logger.info("Payment %s already recorded for order %s", payment_id, order_id)
            return order

        order.mark_as_paid(payment_id)
        await self._orders.save(order)
        return order

    # -- Queries -----------------------------------------------------------

    async def get_order(self, order_id: OrderId) -> Order | None:
        return await self._orders.find_by_id(order_id)

    # -- Bus handlers ------------------------------------------------------

    async def on_payment_confirmed(self, message: IntegrationMessage) -> None:
        payment: PaymentConfirmed = message.payload
        logger.info(
            "Payment %s confirmed for order %s (message %s)",
            payment.payment_id, payment.order_id, message.message_id,
        )
        await self.confirm_payment(OrderId.from_string(payment.order_id), payment.payment_id)

    # -- Helpers -----------------------------------------------------------

    @staticmethod
    def _items_total(items: list[OrderItem]) -> Money:
        total = Money.zero(items[0].currency)
        for item in items:
            total = total + item.subtotal
        return total
