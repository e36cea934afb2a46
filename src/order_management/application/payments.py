"""Payments-context boundary.

Reacts to ``OrderPlaced`` by opening a payment request and announces
successful payments on the bus.  Talking to an actual payment provider
is outside this package; :meth:`PaymentsService.confirm` is the hook a
provider callback would call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from order_management.bus import topics
from order_management.bus.message_bus import IntegrationMessage, MessageBus
from order_management.core.errors import PaymentRequestNotFoundError
from order_management.core.ids import utc_now
from order_management.domain.events import OrderPlaced
from order_management.domain.value_objects import Money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentRequest:
    order_id: str
    customer_id: str
    amount: Money
    requested_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class PaymentConfirmed:
    """Published on ``payments.payment-confirmed``."""

    order_id: str
    payment_id: str
    amount: Money
    confirmed_at: datetime = field(default_factory=utc_now)


class PaymentsService:
    def __init__(self, bus: MessageBus) -> None:
        self._bus = bus
        self._requests: dict[str, PaymentRequest] = {}

    def register(self) -> None:
        self._bus.subscribe(topics.ORDER_PLACED, self.on_order_placed)

    async def on_order_placed(self, message: IntegrationMessage) -> None:
        event: OrderPlaced = message.payload
        request = PaymentRequest(
            order_id=event.aggregate_id,
            customer_id=str(event.customer_id),
            amount=event.total_amount,
        )
        self._requests[request.order_id] = request
        logger.info(
            "Payment requested for order %s: %s (message %s)",
            request.order_id, request.amount, message.message_id,
        )

    async def confirm(self, order_id: str, payment_id: str) -> PaymentConfirmed:
        """Announce that *payment_id* settled the request for *order_id*.

        Raises:
            PaymentRequestNotFoundError: If no payment was requested for
                *order_id*.
        """
        request = self._requests.get(order_id)
        if request is None:
            raise PaymentRequestNotFoundError(order_id)
        confirmation = PaymentConfirmed(
            order_id=order_id, payment_id=payment_id, amount=request.amount,
        )
        await self._bus.publish(topics.PAYMENT_CONFIRMED, confirmation)
        return confirmation

    def get_request(self, order_id: str) -> PaymentRequest | None:
        return self._requests.get(order_id)

    @property
    def pending_requests(self) -> list[PaymentRequest]:
        return list(self._requests.values())
