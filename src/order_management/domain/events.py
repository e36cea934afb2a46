"""Domain events raised by the ordering context.

Design invariants
-----------------
1.  Every event is **immutable** (``frozen=True``).
2.  ``event_id`` is generated at creation time; consumers may use it as
    an idempotency / dedup key.
3.  ``aggregate_id`` is the string identity of the aggregate that raised
    the event, so consumers never need the aggregate's id type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from order_management.core.ids import utc_now as _now

from .value_objects import CartId, CustomerId, EventId, Money, OrderId, ShippingAddress

if TYPE_CHECKING:
    from .order import OrderItem

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Immutable base for every domain event.

    Shared fields
    ~~~~~~~~~~~~~
    event_id      Unique identity.  Idempotency key.
    aggregate_id  Identity of the aggregate that raised the event.
    occurred_at   UTC capture time.
    """

    event_id: EventId = field(default_factory=EventId.generate)
    aggregate_id: str
    occurred_at: datetime = field(default_factory=_now)

    @property
    def event_type(self) -> str:
        return type(self).__name__


# =========================================================================
# Order  (writer: Order aggregate)
# =========================================================================

@dataclass(frozen=True, kw_only=True)
class OrderPlaced(DomainEvent):
    """An order was placed from a shopping cart at checkout."""

    order_id: OrderId
    customer_id: CustomerId
    cart_id: CartId
    items: tuple[OrderItem, ...]
    total_amount: Money
    shipping_address: ShippingAddress
