"""Topic names shared between the ordering and payments contexts."""

ORDER_PLACED = "orders.order-placed"
PAYMENT_CONFIRMED = "payments.payment-confirmed"
