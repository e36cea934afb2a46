"""The ``Order`` aggregate and its ``OrderItem`` lines.

``Order`` is the consistency boundary for a checked-out cart.  It has two
construction paths:

* :meth:`Order.create` is checkout.  Starts in ``awaiting-payment`` and
  records an :class:`~order_management.domain.events.OrderPlaced` event.
* ``Order(...)`` is reconstruction from storage.  Accepts a pre-existing
  status and payment id and records nothing.

Both paths enforce the same invariants, so a loaded order is as valid as
a freshly placed one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from order_management.core.errors import (
    CurrencyMismatchError,
    EmptyOrderError,
    InvalidPaymentIdError,
    OrderAlreadyPaidError,
    OrderStateError,
)

from .events import DomainEvent, OrderPlaced
from .order_status import OrderStatus
from .value_objects import (
    CartId,
    CustomerId,
    Money,
    OrderId,
    ProductId,
    Quantity,
    ShippingAddress,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderItem:
    """A priced order line.

    ``subtotal = unit_price * quantity - item_discount``.
    """

    product_id: ProductId
    quantity: Quantity
    unit_price: Money
    item_discount: Money

    def __post_init__(self) -> None:
        if self.unit_price.currency != self.item_discount.currency:
            raise CurrencyMismatchError(
                self.unit_price.currency, self.item_discount.currency, "price a line with"
            )

    @classmethod
    def create(
        cls,
        product_id: ProductId,
        quantity: Quantity,
        unit_price: Money,
        item_discount: Money | None = None,
    ) -> OrderItem:
        if item_discount is None:
            item_discount = Money.zero(unit_price.currency)
        return cls(product_id, quantity, unit_price, item_discount)

    @property
    def currency(self) -> str:
        return self.unit_price.currency

    @property
    def subtotal(self) -> Money:
        return self.unit_price.multiply(self.quantity.value).subtract(self.item_discount)


class Order:
    """Aggregate root for a placed order."""

    def __init__(
        self,
        *,
        order_id: OrderId,
        cart_id: CartId,
        customer_id: CustomerId,
        items: Iterable[OrderItem],
        shipping_address: ShippingAddress,
        global_discount: Money,
        status: OrderStatus,
        payment_id: str | None = None,
    ) -> None:
        self._order_id = order_id
        self._cart_id = cart_id
        self._customer_id = customer_id
        self._items: tuple[OrderItem, ...] = tuple(items)
        self._shipping_address = shipping_address
        self._global_discount = global_discount
        self._status = status
        self._payment_id = payment_id
        self._events: list[DomainEvent] = []

        self._check_invariants()

    # -- Factory -----------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        cart_id: CartId,
        customer_id: CustomerId,
        items: Iterable[OrderItem],
        shipping_address: ShippingAddress,
        global_discount: Money,
    ) -> Order:
        """Place a new order and record its ``OrderPlaced`` event.

        Raises:
            EmptyOrderError: If *items* is empty.
            CurrencyMismatchError: If the lines and discount do not share
                one currency.
        """
        order = cls(
            order_id=OrderId.generate(),
            cart_id=cart_id,
            customer_id=customer_id,
            items=items,
            shipping_address=shipping_address,
            global_discount=global_discount,
            status=OrderStatus.as_awaiting_payment(),
            payment_id=None,
        )
        order._record(
            OrderPlaced(
                aggregate_id=str(order.order_id),
                order_id=order.order_id,
                customer_id=order.customer_id,
                cart_id=order.cart_id,
                items=order.items,
                total_amount=order.total_amount,
                shipping_address=order.shipping_address,
            )
        )
        logger.info(
            "Order %s placed from cart %s (total=%s)",
            order.order_id, order.cart_id, order.total_amount,
        )
        return order

    # -- Invariants --------------------------------------------------------

    def _check_invariants(self) -> None:
        if not self._items:
            raise EmptyOrderError(f"Order {self._order_id} must contain at least one item")

        # Raises CurrencyMismatchError on mixed currencies.
        self._compute_total()

        if self._status.is_awaiting_payment() and self._payment_id is not None:
            raise OrderStateError(
                f"Order {self._order_id} is awaiting payment but has "
                f"payment_id={self._payment_id!r}"
            )
        if self._status.is_paid() and not self._payment_id:
            raise OrderStateError(f"Order {self._order_id} is paid but has no payment_id")

    def _compute_total(self) -> Money:
        currency = self._global_discount.currency
        total = Money.zero(currency)
        for item in self._items:
            total = total.add(item.subtotal)
        return total.subtract(self._global_discount)

    # -- Behaviour ---------------------------------------------------------

    def mark_as_paid(self, payment_id: str) -> None:
        """Transition ``awaiting-payment -> paid`` and record *payment_id*.

        Raises:
            InvalidPaymentIdError: If *payment_id* is blank.
            OrderAlreadyPaidError: If the order is already paid.  The
                status and the recorded payment id are left untouched.
        """
        if not isinstance(payment_id, str) or not payment_id.strip():
            raise InvalidPaymentIdError(f"Payment id must be a non-blank string, got {payment_id!r}")
        if self._status.is_paid():
            raise OrderAlreadyPaidError(str(self._order_id), self._payment_id)

        self._status = self._status.to_paid()
        self._payment_id = payment_id
        logger.info("Order %s marked as paid (payment_id=%s)", self._order_id, payment_id)

    # -- Events ------------------------------------------------------------

    def _record(self, event: DomainEvent) -> None:
        self._events.append(event)

    def pull_events(self) -> list[DomainEvent]:
        """Return and clear the events recorded since the last pull."""
        events, self._events = self._events, []
        return events

    # -- Read access -------------------------------------------------------

    @property
    def order_id(self) -> OrderId:
        return self._order_id

    @property
    def cart_id(self) -> CartId:
        return self._cart_id

    @property
    def customer_id(self) -> CustomerId:
        return self._customer_id

    @property
    def items(self) -> tuple[OrderItem, ...]:
        return self._items

    @property
    def shipping_address(self) -> ShippingAddress:
        return self._shipping_address

    @property
    def global_discount(self) -> Money:
        return self._global_discount

    @property
    def status(self) -> OrderStatus:
        return self._status

    @property
    def payment_id(self) -> str | None:
        return self._payment_id

    @property
    def total_amount(self) -> Money:
        """Sum of line subtotals minus the global discount, computed on access."""
        return self._compute_total()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Order):
            return NotImplemented
        return self._order_id == other._order_id

    def __hash__(self) -> int:
        return hash(self._order_id)

    def __repr__(self) -> str:
        return (
            f"<Order(order_id={str(self._order_id)!r}, status={str(self._status)!r}, "
            f"items={len(self._items)}, total={self.total_amount})>"
        )
