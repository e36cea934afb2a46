"""Custom exception hierarchy for the order-management backend."""


class OrderManagementError(Exception):
    """Base exception for all order-management errors."""


# --- Configuration ---
class ConfigError(OrderManagementError):
    """Invalid or missing configuration."""


# --- Domain validation ---
class DomainValidationError(OrderManagementError):
    """A value object or aggregate was built from invalid input."""


class InvalidIdentifierError(DomainValidationError):
    """Identifier string is blank or not in the expected format."""


class InvalidQuantityError(DomainValidationError):
    """Quantity is not a positive integer."""


class CurrencyMismatchError(DomainValidationError):
    """Money arithmetic attempted across two currencies."""

    def __init__(self, left: str, right: str, operation: str = "combine"):
        self.left = left
        self.right = right
        super().__init__(
            f"Cannot {operation} money in different currencies: {left} vs {right}"
        )


class InvalidMoneyError(DomainValidationError):
    """Money amount is not a finite number or the currency code is malformed."""


class InvalidOrderStatusError(DomainValidationError):
    """Status string is outside the closed set of order states."""

    def __init__(self, value: object, allowed: tuple[str, ...]):
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"Invalid status: {value!s}. Must be one of [{','.join(allowed)}]"
        )


class InvalidShippingAddressError(DomainValidationError):
    """A required shipping address field is blank."""


class EmptyOrderError(DomainValidationError):
    """An order must contain at least one item."""


class InvalidPaymentIdError(DomainValidationError):
    """Payment identifier is blank."""


# --- Order lifecycle ---
class OrderError(OrderManagementError):
    """Order lifecycle error."""


class OrderStateError(OrderError):
    """Status and payment id are inconsistent."""


class OrderAlreadyPaidError(OrderError):
    """``mark_as_paid`` called on an order that is already paid."""

    def __init__(self, order_id: str, payment_id: str | None):
        self.order_id = order_id
        self.payment_id = payment_id
        super().__init__(
            f"Order {order_id} is already paid (payment_id={payment_id})"
        )


class OrderNotFoundError(OrderError):
    """No order exists for the requested identifier."""


# --- Cart ---
class CartError(OrderManagementError):
    """Shopping cart error."""


class EmptyCartError(CartError):
    """Checkout attempted on a cart with no items."""


class CartAlreadyConvertedError(CartError):
    """The cart has already been checked out."""


class CartNotFoundError(CartError):
    """No cart exists for the requested identifier."""


# --- Payments ---
class PaymentError(OrderManagementError):
    """Payments-context error."""


class PaymentRequestNotFoundError(PaymentError):
    """No payment was requested for the order."""

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"No payment request for order {order_id}")


# --- Persistence ---
class PersistenceError(OrderManagementError):
    """Storage-layer error raised by this package (not the driver)."""


class OrderIntegrityError(PersistenceError):
    """Stored rows violate the aggregate's foreign-key shape."""
