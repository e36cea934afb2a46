"""Domain layer: value objects, the Order aggregate, events, cart.

This package defines the ordering primitives every other layer depends
on.  Nothing here performs I/O.
"""

from .cart import CartItem, CartStatus, ShoppingCart
from .events import DomainEvent, OrderPlaced
from .order import Order, OrderItem
from .order_status import OrderStatus
from .value_objects import (
    CartId,
    CustomerId,
    EventId,
    Money,
    OrderId,
    ProductId,
    Quantity,
    ShippingAddress,
)

__all__ = [
    "CartId",
    "CartItem",
    "CartStatus",
    "CustomerId",
    "DomainEvent",
    "EventId",
    "Money",
    "Order",
    "OrderId",
    "OrderItem",
    "OrderPlaced",
    "OrderStatus",
    "ProductId",
    "Quantity",
    "ShippingAddress",
    "ShoppingCart",
]
