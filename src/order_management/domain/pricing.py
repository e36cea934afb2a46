"""Pricing gateway boundary.

Checkout asks the gateway for unit prices and discounts; the answers
become the ``Money`` inputs of :meth:`Order.create`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .value_objects import CustomerId, Money, ProductId, Quantity


@runtime_checkable
class PricingGateway(Protocol):
    def get_product_price(self, product_id: ProductId) -> Money: ...

    def get_product_discount(
        self,
        product_id: ProductId,
        customer_id: CustomerId,
        quantity: Quantity,
    ) -> Money: ...

    def get_order_discount(self, customer_id: CustomerId, order_total: Money) -> Money: ...


class StaticPricingGateway:
    """In-memory catalogue: fixed prices plus optional fixed discounts.

    Discounts are absolute amounts, not percentages.  Products without a
    configured discount (and customers without an order discount) get zero.
    """

    def __init__(
        self,
        prices: dict[str, Money],
        *,
        product_discounts: dict[str, Money] | None = None,
        order_discounts: dict[str, Money] | None = None,
    ) -> None:
        self._prices = dict(prices)
        self._product_discounts = dict(product_discounts or {})
        self._order_discounts = dict(order_discounts or {})

    def get_product_price(self, product_id: ProductId) -> Money:
        try:
            return self._prices[str(product_id)]
        except KeyError:
            raise LookupError(f"No price configured for product {product_id}") from None

    def get_product_discount(
        self,
        product_id: ProductId,
        customer_id: CustomerId,
        quantity: Quantity,
    ) -> Money:
        price = self.get_product_price(product_id)
        return self._product_discounts.get(str(product_id), Money.zero(price.currency))

    def get_order_discount(self, customer_id: CustomerId, order_total: Money) -> Money:
        return self._order_discounts.get(str(customer_id), Money.zero(order_total.currency))
