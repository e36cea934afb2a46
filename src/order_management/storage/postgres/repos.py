"""Repository for async persistence of the ``Order`` aggregate.

The aggregate spans three tables (see :mod:`.models`).  Every ``save`` is
one transaction: the address upsert, the order upsert and the item
replacement either all land or none do.

Conversion between the aggregate and rows lives in :mod:`.mapper`; this
module only runs the read/write protocol.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import InstrumentedAttribute

from order_management.core.ids import utc_now
from order_management.domain.order import Order
from order_management.domain.value_objects import CartId, OrderId

from .connection import session_scope
from .mapper import OrderMapper, OrderRows
from .models import OrderItemRecord, OrderRecord, ShippingAddressRecord

logger = logging.getLogger(__name__)


def _record_to_row(record: Any) -> dict[str, Any]:
    """Plain column -> value dict for an ORM record."""
    return {column.key: getattr(record, column.key) for column in record.__table__.columns}


class SqlAlchemyOrderRepository:
    """Relational :class:`~order_management.domain.repository.OrderRepository`.

    Holds a session factory rather than a session: each call opens its own
    transaction-scoped session from the shared engine pool.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # -- Write -------------------------------------------------------------

    async def save(self, order: Order) -> None:
        """Insert or update *order* keyed by ``order_id``.

        Insert path: address row, then order row referencing it, then
        items.  Update path: address row updated in place, order row's
        mutable fields updated, items deleted and re-inserted.  Any failure
        rolls the whole save back.
        """
        rows = OrderMapper.to_persistence(order)
        order_id = rows.order_row["order_id"]

        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(OrderRecord.shipping_address_id).where(OrderRecord.order_id == order_id)
            )
            address_id = result.scalar_one_or_none()

            if address_id is None:
                await self._insert(session, rows)
                logger.debug("Inserted order %s", order_id)
            else:
                await self._update(session, rows, address_id)
                logger.debug("Updated order %s -> status=%s", order_id, rows.order_row["status"])

    async def _insert(self, session: AsyncSession, rows: OrderRows) -> None:
        address = ShippingAddressRecord(**rows.address_row)
        session.add(address)
        await session.flush()

        order_values = dict(rows.order_row)
        order_values["shipping_address_id"] = address.id
        session.add(OrderRecord(**order_values))
        await session.flush()

        session.add_all([OrderItemRecord(**row) for row in rows.item_rows])
        await session.flush()

    async def _update(self, session: AsyncSession, rows: OrderRows, address_id: int) -> None:
        order_id = rows.order_row["order_id"]

        await session.execute(
            update(ShippingAddressRecord)
            .where(ShippingAddressRecord.id == address_id)
            .values(**rows.address_row)
        )
        await session.execute(
            update(OrderRecord)
            .where(OrderRecord.order_id == order_id)
            .values(
                status=rows.order_row["status"],
                payment_id=rows.order_row["payment_id"],
                global_discount_amount=rows.order_row["global_discount_amount"],
                global_discount_currency=rows.order_row["global_discount_currency"],
                updated_at=utc_now(),
            )
        )

        # Replace the item set wholesale; the loaded result is exactly the
        # saved lines.
        await session.execute(delete(OrderItemRecord).where(OrderItemRecord.order_id == order_id))
        session.add_all([OrderItemRecord(**row) for row in rows.item_rows])
        await session.flush()

    async def delete(self, order_id: OrderId) -> bool:
        """Remove an order, its items (cascade) and its address row.

        Returns:
            ``True`` if an order was deleted, ``False`` if none existed.
        """
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(OrderRecord.shipping_address_id).where(
                    OrderRecord.order_id == str(order_id)
                )
            )
            address_id = result.scalar_one_or_none()
            if address_id is None:
                return False

            await session.execute(
                delete(OrderItemRecord).where(OrderItemRecord.order_id == str(order_id))
            )
            await session.execute(delete(OrderRecord).where(OrderRecord.order_id == str(order_id)))
            await session.execute(
                delete(ShippingAddressRecord).where(ShippingAddressRecord.id == address_id)
            )
        logger.info("Deleted order %s", order_id)
        return True

    # -- Read --------------------------------------------------------------

    async def find_by_id(self, order_id: OrderId) -> Order | None:
        return await self._find_by(OrderRecord.order_id, str(order_id))

    async def find_by_cart_id(self, cart_id: CartId) -> Order | None:
        return await self._find_by(OrderRecord.cart_id, str(cart_id))

    async def _find_by(self, column: InstrumentedAttribute, value: str) -> Order | None:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(OrderRecord).where(column == value).order_by(OrderRecord.created_at).limit(1)
            )
            order_record = result.scalar_one_or_none()
            if order_record is None:
                return None
            return await self._hydrate(session, order_record)

    async def _hydrate(self, session: AsyncSession, order_record: OrderRecord) -> Order:
        """Load the address and items of *order_record* and rebuild the aggregate."""
        address_record = await session.get(ShippingAddressRecord, order_record.shipping_address_id)

        result = await session.execute(
            select(OrderItemRecord)
            .where(OrderItemRecord.order_id == order_record.order_id)
            .order_by(OrderItemRecord.position, OrderItemRecord.id)
        )
        item_records = result.scalars().all()

        if address_record is None:
            logger.error(
                "Integrity violation: order %s references missing shipping address %s",
                order_record.order_id, order_record.shipping_address_id,
            )

        return OrderMapper.to_domain(
            _record_to_row(order_record),
            [_record_to_row(r) for r in item_records],
            _record_to_row(address_record) if address_record is not None else None,
        )
