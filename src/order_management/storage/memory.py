"""In-memory repositories for tests, demos and single-process use.

``InMemoryOrderRepository`` stores the mapper's row shapes rather than
the aggregate itself, so every load reconstructs a fresh ``Order`` the
same way the relational repository does and callers can never mutate
stored state by holding on to an instance.
"""

from __future__ import annotations

import copy
import logging

from order_management.domain.cart import CartItem, ShoppingCart
from order_management.domain.order import Order
from order_management.domain.value_objects import CartId, CustomerId, OrderId

from .postgres.mapper import OrderMapper, OrderRows

logger = logging.getLogger(__name__)


class InMemoryOrderRepository:
    """Dict-backed :class:`~order_management.domain.repository.OrderRepository`."""

    def __init__(self) -> None:
        self._rows: dict[str, OrderRows] = {}

    async def save(self, order: Order) -> None:
        rows = OrderMapper.to_persistence(order)
        order_id = rows.order_row["order_id"]
        action = "Updated" if order_id in self._rows else "Inserted"
        self._rows[order_id] = copy.deepcopy(rows)
        logger.debug("%s order %s", action, order_id)

    async def find_by_id(self, order_id: OrderId) -> Order | None:
        rows = self._rows.get(str(order_id))
        return self._load(rows) if rows is not None else None

    async def find_by_cart_id(self, cart_id: CartId) -> Order | None:
        for rows in self._rows.values():
            if rows.order_row["cart_id"] == str(cart_id):
                return self._load(rows)
        return None

    @staticmethod
    def _load(rows: OrderRows) -> Order:
        return OrderMapper.to_domain(rows.order_row, rows.item_rows, rows.address_row)

    def __len__(self) -> int:
        return len(self._rows)


class InMemoryShoppingCartRepository:
    """Dict-backed :class:`~order_management.domain.repository.ShoppingCartRepository`."""

    def __init__(self) -> None:
        self._carts: dict[str, ShoppingCart] = {}

    async def save(self, cart: ShoppingCart) -> None:
        self._carts[str(cart.cart_id)] = self._copy(cart)

    async def find_by_id(self, cart_id: CartId) -> ShoppingCart | None:
        cart = self._carts.get(str(cart_id))
        return self._copy(cart) if cart is not None else None

    async def find_by_customer_id(self, customer_id: CustomerId) -> list[ShoppingCart]:
        return [self._copy(c) for c in self._carts.values() if c.customer_id == customer_id]

    async def delete(self, cart_id: CartId) -> None:
        self._carts.pop(str(cart_id), None)

    @staticmethod
    def _copy(cart: ShoppingCart) -> ShoppingCart:
        return ShoppingCart(
            cart.cart_id,
            cart.customer_id,
            [CartItem.create(i.product_id, i.quantity) for i in cart.items],
            cart.status,
        )
