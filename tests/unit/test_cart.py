"""Tests for ShoppingCart and CartItem."""

from __future__ import annotations

import pytest

from order_management.core.errors import CartAlreadyConvertedError, EmptyCartError
from order_management.domain.cart import CartStatus, ShoppingCart
from order_management.domain.value_objects import CustomerId, ProductId, Quantity


def _sku(value: str) -> ProductId:
    return ProductId.from_string(value)


class TestShoppingCart:
    def test_new_cart_is_active_and_empty(self):
        cart = ShoppingCart.create(CustomerId.from_string("c-1"))
        assert cart.status is CartStatus.ACTIVE
        assert cart.is_empty()

    def test_duplicate_product_lines_merge(self, cart: ShoppingCart):
        cart.add_item(_sku("PRODUCT-A"), Quantity.of(3))
        assert len(cart.items) == 2
        assert cart.get_item(_sku("PRODUCT-A")).quantity == Quantity.of(5)

    def test_items_keep_insertion_order(self, cart: ShoppingCart):
        assert [str(i.product_id) for i in cart.items] == ["PRODUCT-A", "PRODUCT-B"]

    def test_get_missing_item(self, cart: ShoppingCart):
        assert cart.get_item(_sku("NOPE")) is None

    def test_remove_item(self, cart: ShoppingCart):
        cart.remove_item(_sku("PRODUCT-A"))
        assert [str(i.product_id) for i in cart.items] == ["PRODUCT-B"]

    def test_update_quantity(self, cart: ShoppingCart):
        cart.get_item(_sku("PRODUCT-B")).update_quantity(Quantity.of(7))
        assert cart.get_item(_sku("PRODUCT-B")).quantity == Quantity.of(7)

    def test_convert(self, cart: ShoppingCart):
        cart.mark_as_converted()
        assert cart.is_converted

    def test_converted_cart_rejects_changes(self, cart: ShoppingCart):
        cart.mark_as_converted()
        with pytest.raises(CartAlreadyConvertedError):
            cart.add_item(_sku("PRODUCT-C"), Quantity.of(1))
        with pytest.raises(CartAlreadyConvertedError):
            cart.mark_as_converted()

    def test_empty_cart_cannot_convert(self):
        cart = ShoppingCart.create(CustomerId.from_string("c-1"))
        with pytest.raises(EmptyCartError):
            cart.mark_as_converted()
