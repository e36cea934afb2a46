"""Application services: checkout, payment confirmation, payments boundary."""

from .orders_service import OrdersService
from .payments import PaymentConfirmed, PaymentRequest, PaymentsService

__all__ = ["OrdersService", "PaymentConfirmed", "PaymentRequest", "PaymentsService"]
