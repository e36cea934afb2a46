"""SQLAlchemy ORM models for the ordering database.

The ``Order`` aggregate is split over three tables:

    ShippingAddressRecord 1--* OrderRecord      (shipping_address_id FK)
    OrderRecord           1--* OrderItemRecord  (order_id FK, ON DELETE CASCADE)

``orders`` is keyed by the domain ``order_id``; the other two tables use
integer surrogate keys.  Each ``Money`` field is stored as an
``<name>_amount`` / ``<name>_currency`` column pair.  There is no total
column: totals are recomputed from the items on load.

Column types are portable (PostgreSQL in production, SQLite in tests).
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DecimalString(TypeDecorator):
    """``NUMERIC`` column that speaks decimal strings on the Python side.

    Binds ``"100.00"``-style strings (or ``Decimal``) as ``Decimal`` and
    returns a plain decimal string, so amounts never pass through ``float``
    on the way in or out of the mapper.
    """

    impl = Numeric(10, 2)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return Decimal(str(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return format(Decimal(str(value)).quantize(Decimal("0.01")), "f")


# ---------------------------------------------------------------------------
# Declarative base
# ---------------------------------------------------------------------------

class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""

    pass


# ---------------------------------------------------------------------------
# ShippingAddressRecord
# ---------------------------------------------------------------------------

class ShippingAddressRecord(Base):
    """Shipping address value object.  No business identity."""

    __tablename__ = "shipping_addresses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    street: Mapped[str] = mapped_column(String(200), nullable=False)
    address_line2: Mapped[str | None] = mapped_column(String(200), nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state_or_province: Mapped[str] = mapped_column(String(100), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    delivery_instructions: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<ShippingAddressRecord(id={self.id!r}, city={self.city!r})>"


# ---------------------------------------------------------------------------
# OrderRecord
# ---------------------------------------------------------------------------

class OrderRecord(Base):
    """Order aggregate root row.

    Every status transition results in an UPDATE to this row rather than
    a new INSERT, so the row always reflects the latest state.
    """

    __tablename__ = "orders"

    order_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    cart_id: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_id: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    global_discount_amount: Mapped[str] = mapped_column(DecimalString, nullable=False)
    global_discount_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    shipping_address_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("shipping_addresses.id"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False,
    )

    __table_args__ = (
        Index("idx_orders_cart_id", "cart_id"),
    )

    def __repr__(self) -> str:
        return f"<OrderRecord(order_id={self.order_id!r}, status={self.status!r})>"


# ---------------------------------------------------------------------------
# OrderItemRecord
# ---------------------------------------------------------------------------

class OrderItemRecord(Base):
    """One order line.  Deleted with its order."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("orders.order_id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    product_id: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_amount: Mapped[str] = mapped_column(DecimalString, nullable=False)
    unit_price_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    item_discount_amount: Mapped[str] = mapped_column(DecimalString, nullable=False)
    item_discount_currency: Mapped[str] = mapped_column(String(3), nullable=False)

    __table_args__ = (
        Index("idx_order_items_order_id", "order_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<OrderItemRecord(order_id={self.order_id!r}, "
            f"product_id={self.product_id!r}, quantity={self.quantity!r})>"
        )
