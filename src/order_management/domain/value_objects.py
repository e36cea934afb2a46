"""Immutable value objects shared by the ordering context.

Every type here is a frozen dataclass: equality is structural and
instances are hashable.  Validation happens in ``__post_init__`` so an
invalid value can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from order_management.core.errors import (
    CurrencyMismatchError,
    InvalidIdentifierError,
    InvalidMoneyError,
    InvalidQuantityError,
    InvalidShippingAddressError,
)
from order_management.core.ids import is_uuid, new_id

# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _StringId:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise InvalidIdentifierError(
                f"{type(self).__name__} must be a non-blank string, got {self.value!r}"
            )

    @classmethod
    def from_string(cls, value: str):
        return cls(value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class _UuidId(_StringId):
    def __post_init__(self) -> None:
        super().__post_init__()
        if not is_uuid(self.value):
            raise InvalidIdentifierError(
                f"{type(self).__name__} must be a UUID, got {self.value!r}"
            )

    @classmethod
    def generate(cls):
        return cls(new_id())


@dataclass(frozen=True)
class OrderId(_UuidId):
    """Identity of an :class:`~order_management.domain.order.Order`."""


@dataclass(frozen=True)
class CartId(_UuidId):
    """Identity of a shopping cart."""


@dataclass(frozen=True)
class EventId(_UuidId):
    """Identity of a domain event."""


@dataclass(frozen=True)
class CustomerId(_StringId):
    """Customer identity, owned by the identity context."""


@dataclass(frozen=True)
class ProductId(_StringId):
    """Product identity (SKU), owned by the catalogue."""


# ---------------------------------------------------------------------------
# Quantity
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Quantity:
    """A positive integer count of units."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidQuantityError(
                f"Quantity must be an integer, got {self.value!r}"
            )
        if self.value <= 0:
            raise InvalidQuantityError(
                f"Quantity must be positive, got {self.value}"
            )

    @classmethod
    def of(cls, value: int) -> Quantity:
        return cls(value)

    def add(self, other: Quantity) -> Quantity:
        return Quantity(self.value + other.value)

    def __add__(self, other: Quantity) -> Quantity:
        if not isinstance(other, Quantity):
            return NotImplemented
        return self.add(other)

    def __int__(self) -> int:
        return self.value


# ---------------------------------------------------------------------------
# Money
# ---------------------------------------------------------------------------

# Smallest representable amount.  Stored columns are NUMERIC(10, 2).
MINOR_UNIT = Decimal("0.01")


def _to_decimal(amount: Any) -> Decimal:
    if isinstance(amount, bool):
        raise InvalidMoneyError(f"Money amount must be numeric, got {amount!r}")
    if isinstance(amount, float):
        amount = str(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidMoneyError(f"Money amount must be numeric, got {amount!r}") from exc
    if not value.is_finite():
        raise InvalidMoneyError(f"Money amount must be finite, got {amount!r}")
    try:
        representable = value == value.quantize(MINOR_UNIT)
    except InvalidOperation as exc:
        raise InvalidMoneyError(f"Money amount is out of range, got {amount!r}") from exc
    if not representable:
        raise InvalidMoneyError(
            f"Money amount must not be finer than {MINOR_UNIT}, got {amount!r}"
        )
    return value


@dataclass(frozen=True)
class Money:
    """Exact decimal amount in a single ISO-4217 currency.

    Arithmetic and ordering between two ``Money`` values require the same
    currency and raise :class:`CurrencyMismatchError` otherwise.  ``==``
    stays structural, so values in different currencies are simply unequal.

    Amounts finer than :data:`MINOR_UNIT` are rejected rather than rounded;
    ``Money("1.500", "USD")`` is accepted because it equals ``1.50``.
    """

    amount: Decimal
    currency: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _to_decimal(self.amount))
        if (
            not isinstance(self.currency, str)
            or len(self.currency) != 3
            or not self.currency.isalpha()
        ):
            raise InvalidMoneyError(
                f"Currency must be a 3-letter ISO code, got {self.currency!r}"
            )
        object.__setattr__(self, "currency", self.currency.upper())

    @classmethod
    def zero(cls, currency: str) -> Money:
        return cls(Decimal("0"), currency)

    def _check_currency(self, other: Money, operation: str) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency, operation)

    def add(self, other: Money) -> Money:
        self._check_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: Money) -> Money:
        self._check_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def multiply(self, factor: int) -> Money:
        if isinstance(factor, Quantity):
            factor = factor.value
        return Money(self.amount * factor, self.currency)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, factor: int) -> Money:
        return self.multiply(factor)

    __rmul__ = __mul__

    def __lt__(self, other: Money) -> bool:
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def is_zero(self) -> bool:
        return self.amount == 0

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"


# ---------------------------------------------------------------------------
# ShippingAddress
# ---------------------------------------------------------------------------

_REQUIRED_ADDRESS_FIELDS = ("street", "city", "state_or_province", "postal_code", "country")


@dataclass(frozen=True)
class ShippingAddress:
    """Delivery address.  No identity; compared by value."""

    street: str
    city: str
    state_or_province: str
    postal_code: str
    country: str
    address_line2: str | None = None
    delivery_instructions: str | None = None

    def __post_init__(self) -> None:
        for name in _REQUIRED_ADDRESS_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidShippingAddressError(
                    f"Shipping address field '{name}' is required"
                )
