"""Repository interfaces for the ordering aggregates.

Implementations live in :mod:`order_management.storage`.  "Not found" is
a normal outcome and is reported as ``None``, never as an exception.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .cart import ShoppingCart
from .order import Order
from .value_objects import CartId, CustomerId, OrderId


@runtime_checkable
class OrderRepository(Protocol):
    async def save(self, order: Order) -> None:
        """Insert or update *order* keyed by its ``order_id``."""
        ...

    async def find_by_id(self, order_id: OrderId) -> Order | None: ...

    async def find_by_cart_id(self, cart_id: CartId) -> Order | None: ...


@runtime_checkable
class ShoppingCartRepository(Protocol):
    async def save(self, cart: ShoppingCart) -> None: ...

    async def find_by_id(self, cart_id: CartId) -> ShoppingCart | None: ...

    async def find_by_customer_id(self, customer_id: CustomerId) -> list[ShoppingCart]: ...

    async def delete(self, cart_id: CartId) -> None: ...
