"""Shopping cart: the mutable pre-checkout basket a customer builds."""

from __future__ import annotations

from enum import Enum

from order_management.core.errors import CartAlreadyConvertedError, EmptyCartError

from .value_objects import CartId, CustomerId, ProductId, Quantity


class CartStatus(str, Enum):
    ACTIVE = "active"
    CONVERTED = "converted"


class CartItem:
    """A product line in a cart.  Quantity is mutable until checkout."""

    def __init__(self, product_id: ProductId, quantity: Quantity) -> None:
        self._product_id = product_id
        self._quantity = quantity

    @classmethod
    def create(cls, product_id: ProductId, quantity: Quantity) -> CartItem:
        return cls(product_id, quantity)

    @property
    def product_id(self) -> ProductId:
        return self._product_id

    @property
    def quantity(self) -> Quantity:
        return self._quantity

    def update_quantity(self, new_quantity: Quantity) -> None:
        self._quantity = new_quantity

    def add_quantity(self, additional: Quantity) -> None:
        self._quantity = self._quantity.add(additional)

    def __repr__(self) -> str:
        return f"<CartItem(product_id={str(self._product_id)!r}, quantity={self._quantity.value})>"


class ShoppingCart:
    """Customer basket.  Adding an existing product merges the lines."""

    def __init__(
        self,
        cart_id: CartId,
        customer_id: CustomerId,
        items: list[CartItem] | None = None,
        status: CartStatus = CartStatus.ACTIVE,
    ) -> None:
        self._cart_id = cart_id
        self._customer_id = customer_id
        self._items: list[CartItem] = list(items or [])
        self._status = status

    @classmethod
    def create(cls, customer_id: CustomerId) -> ShoppingCart:
        return cls(CartId.generate(), customer_id)

    # -- Behaviour ---------------------------------------------------------

    def _ensure_active(self) -> None:
        if self._status is CartStatus.CONVERTED:
            raise CartAlreadyConvertedError(f"Cart {self._cart_id} has already been checked out")

    def add_item(self, product_id: ProductId, quantity: Quantity) -> None:
        self._ensure_active()
        existing = self.get_item(product_id)
        if existing is not None:
            existing.add_quantity(quantity)
        else:
            self._items.append(CartItem.create(product_id, quantity))

    def get_item(self, product_id: ProductId) -> CartItem | None:
        for item in self._items:
            if item.product_id == product_id:
                return item
        return None

    def remove_item(self, product_id: ProductId) -> None:
        self._ensure_active()
        self._items = [i for i in self._items if i.product_id != product_id]

    def mark_as_converted(self) -> None:
        self._ensure_active()
        if not self._items:
            raise EmptyCartError(f"Cart {self._cart_id} has no items")
        self._status = CartStatus.CONVERTED

    # -- Read access -------------------------------------------------------

    @property
    def cart_id(self) -> CartId:
        return self._cart_id

    @property
    def customer_id(self) -> CustomerId:
        return self._customer_id

    @property
    def items(self) -> tuple[CartItem, ...]:
        return tuple(self._items)

    @property
    def status(self) -> CartStatus:
        return self._status

    @property
    def is_converted(self) -> bool:
        return self._status is CartStatus.CONVERTED

    def is_empty(self) -> bool:
        return not self._items
