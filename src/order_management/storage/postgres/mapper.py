"""Data mapper: ``Order`` aggregate <-> relational row shapes.

Pure translation, no I/O.  The repository owns the read/write protocol;
this module only knows which column each aggregate field lands in.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, NamedTuple, TypedDict

from order_management.core.errors import OrderIntegrityError
from order_management.domain.order import Order, OrderItem
from order_management.domain.order_status import OrderStatus
from order_management.domain.value_objects import (
    CartId,
    CustomerId,
    Money,
    OrderId,
    ProductId,
    Quantity,
    ShippingAddress,
)

# Filled in by the repository once the address row has an id.
ADDRESS_ID_PLACEHOLDER = 0


# ---------------------------------------------------------------------------
# Row shapes
# ---------------------------------------------------------------------------

class ShippingAddressRow(TypedDict):
    street: str
    address_line2: str | None
    city: str
    state_or_province: str
    postal_code: str
    country: str
    delivery_instructions: str | None


class OrderRow(TypedDict):
    order_id: str
    cart_id: str
    customer_id: str
    status: str
    payment_id: str | None
    global_discount_amount: str
    global_discount_currency: str
    shipping_address_id: int


class OrderItemRow(TypedDict):
    order_id: str
    position: int
    product_id: str
    quantity: int
    unit_price_amount: str
    unit_price_currency: str
    item_discount_amount: str
    item_discount_currency: str


class OrderRows(NamedTuple):
    order_row: OrderRow
    address_row: ShippingAddressRow
    item_rows: list[OrderItemRow]


# ---------------------------------------------------------------------------
# Money helpers
# ---------------------------------------------------------------------------

def _amount_to_str(money: Money) -> str:
    return format(money.amount, "f")


def _money_from(amount: Any, currency: str) -> Money:
    # Drivers hand back str or Decimal; float never reaches Money.
    return Money(Decimal(str(amount)), currency)


# ---------------------------------------------------------------------------
# Mapper
# ---------------------------------------------------------------------------

class OrderMapper:
    """Translates between :class:`Order` and its three row shapes."""

    @staticmethod
    def to_persistence(order: Order) -> OrderRows:
        """Decompose *order* into address, order and item rows.

        The address row has no id (storage assigns it) and the order row's
        ``shipping_address_id`` is :data:`ADDRESS_ID_PLACEHOLDER` until the
        caller has inserted the address.  Money amounts are decimal strings.
        """
        order_id = str(order.order_id)
        address = order.shipping_address

        address_row: ShippingAddressRow = {
            "street": address.street,
            "address_line2": address.address_line2,
            "city": address.city,
            "state_or_province": address.state_or_province,
            "postal_code": address.postal_code,
            "country": address.country,
            "delivery_instructions": address.delivery_instructions,
        }

        item_rows: list[OrderItemRow] = [
            {
                "order_id": order_id,
                "position": position,
                "product_id": str(item.product_id),
                "quantity": item.quantity.value,
                "unit_price_amount": _amount_to_str(item.unit_price),
                "unit_price_currency": item.unit_price.currency,
                "item_discount_amount": _amount_to_str(item.item_discount),
                "item_discount_currency": item.item_discount.currency,
            }
            for position, item in enumerate(order.items)
        ]

        order_row: OrderRow = {
            "order_id": order_id,
            "cart_id": str(order.cart_id),
            "customer_id": str(order.customer_id),
            "status": str(order.status),
            "payment_id": order.payment_id,
            "global_discount_amount": _amount_to_str(order.global_discount),
            "global_discount_currency": order.global_discount.currency,
            "shipping_address_id": ADDRESS_ID_PLACEHOLDER,
        }

        return OrderRows(order_row=order_row, address_row=address_row, item_rows=item_rows)

    @staticmethod
    def to_domain(
        order_row: Mapping[str, Any],
        item_rows: Sequence[Mapping[str, Any]],
        address_row: Mapping[str, Any] | None,
    ) -> Order:
        """Rebuild an :class:`Order` without recording any event.

        Raises:
            OrderIntegrityError: If *address_row* is missing.
            InvalidOrderStatusError: If the stored status is not one of the
                known states.
        """
        if address_row is None:
            raise OrderIntegrityError(
                f"Shipping address not found for order {order_row['order_id']}"
            )

        shipping_address = ShippingAddress(
            street=address_row["street"],
            address_line2=address_row.get("address_line2"),
            city=address_row["city"],
            state_or_province=address_row["state_or_province"],
            postal_code=address_row["postal_code"],
            country=address_row["country"],
            delivery_instructions=address_row.get("delivery_instructions"),
        )

        ordered_rows = sorted(item_rows, key=lambda row: row.get("position", 0))
        items = [
            OrderItem(
                product_id=ProductId.from_string(row["product_id"]),
                quantity=Quantity.of(int(row["quantity"])),
                unit_price=_money_from(row["unit_price_amount"], row["unit_price_currency"]),
                item_discount=_money_from(
                    row["item_discount_amount"], row["item_discount_currency"]
                ),
            )
            for row in ordered_rows
        ]

        return Order(
            order_id=OrderId.from_string(order_row["order_id"]),
            cart_id=CartId.from_string(order_row["cart_id"]),
            customer_id=CustomerId.from_string(order_row["customer_id"]),
            items=items,
            shipping_address=shipping_address,
            global_discount=_money_from(
                order_row["global_discount_amount"], order_row["global_discount_currency"]
            ),
            status=OrderStatus.from_string(order_row["status"]),
            payment_id=order_row.get("payment_id"),
        )
