"""Order lifecycle status: a closed two-state value object."""

from __future__ import annotations

from dataclasses import dataclass

from order_management.core.errors import InvalidOrderStatusError

AWAITING_PAYMENT = "awaiting-payment"
PAID = "paid"

VALID_STATUSES: tuple[str, ...] = (AWAITING_PAYMENT, PAID)


@dataclass(frozen=True)
class OrderStatus:
    """One of ``awaiting-payment`` or ``paid``.

    The only legal transition is ``awaiting-payment -> paid``.  This type
    does not police transitions; :meth:`to_paid` always answers a fresh
    ``paid`` status and the aggregate decides when it may be called.
    """

    value: str

    def __post_init__(self) -> None:
        if self.value not in VALID_STATUSES:
            raise InvalidOrderStatusError(self.value, VALID_STATUSES)

    @classmethod
    def as_awaiting_payment(cls) -> OrderStatus:
        return cls(AWAITING_PAYMENT)

    @classmethod
    def as_paid(cls) -> OrderStatus:
        return cls(PAID)

    @classmethod
    def from_string(cls, value: str) -> OrderStatus:
        """Rebuild a status from its stored form.

        Exhaustive over the closed set: an unknown string raises
        :class:`InvalidOrderStatusError` instead of defaulting.
        """
        return cls(value)

    def to_paid(self) -> OrderStatus:
        return OrderStatus.as_paid()

    def is_paid(self) -> bool:
        return self.value == PAID

    def is_awaiting_payment(self) -> bool:
        return self.value == AWAITING_PAYMENT

    def __str__(self) -> str:
        return self.value
