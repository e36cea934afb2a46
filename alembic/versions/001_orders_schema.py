"""Orders schema: shipping_addresses, orders, order_items.

Revision ID: 001_orders
Revises: None
Create Date: 2026-10-18 00:00:00.000000
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_orders"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Shipping address value object: surrogate key, no domain identity
    op.create_table(
        "shipping_addresses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("street", sa.String(200), nullable=False),
        sa.Column("address_line2", sa.String(200), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state_or_province", sa.String(100), nullable=False),
        sa.Column("postal_code", sa.String(20), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("delivery_instructions", sa.String(500), nullable=True),
    )

    # Order aggregate root, keyed by the domain order_id
    op.create_table(
        "orders",
        sa.Column("order_id", sa.String(255), primary_key=True),
        sa.Column("cart_id", sa.String(255), nullable=False),
        sa.Column("customer_id", sa.String(255), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("payment_id", sa.String(255), nullable=True),
        sa.Column("global_discount_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("global_discount_currency", sa.String(3), nullable=False),
        sa.Column(
            "shipping_address_id",
            sa.Integer,
            sa.ForeignKey("shipping_addresses.id"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_orders_cart_id", "orders", ["cart_id"])

    # Order lines, deleted with their order
    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "order_id",
            sa.String(255),
            sa.ForeignKey("orders.order_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("product_id", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("unit_price_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("unit_price_currency", sa.String(3), nullable=False),
        sa.Column("item_discount_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("item_discount_currency", sa.String(3), nullable=False),
    )
    op.create_index("idx_order_items_order_id", "order_items", ["order_id"])


def downgrade() -> None:
    op.drop_index("idx_order_items_order_id", table_name="order_items")
    op.drop_table("order_items")
    op.drop_index("idx_orders_cart_id", table_name="orders")
    op.drop_table("orders")
    op.drop_table("shipping_addresses")
