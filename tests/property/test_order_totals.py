"""Property test: Order totals and payment state.

Uses hypothesis to generate random order lines and verify that the total
is always the exact decimal sum of line subtotals minus the global
discount, that it survives the mapper and a real SQLite repository
unchanged, that amounts the columns cannot hold never enter the domain,
and that an order can only be paid once.
"""

import asyncio
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st

from order_management.core.errors import (
    CurrencyMismatchError,
    InvalidMoneyError,
    OrderAlreadyPaidError,
)
from order_management.domain.value_objects import MINOR_UNIT, Money
from order_management.storage.postgres.connection import (
    create_all,
    create_engine,
    create_session_factory,
)
from order_management.storage.postgres.mapper import OrderMapper
from order_management.storage.postgres.repos import SqlAlchemyOrderRepository

from factories import make_line, make_order, usd

amounts = st.decimals(
    min_value=Decimal("0.00"), max_value=Decimal("9999.99"), places=2,
    allow_nan=False, allow_infinity=False,
)

# Up to four places: some fit the columns, some are sub-cent.
any_scale_amounts = st.decimals(
    min_value=Decimal("0.0000"), max_value=Decimal("9999.9999"), places=4,
    allow_nan=False, allow_infinity=False,
)

lines = st.lists(
    st.tuples(
        st.integers(min_value=1, max_value=50),  # quantity
        amounts,                                  # unit price
        amounts,                                  # item discount
    ),
    min_size=1,
    max_size=8,
)

payment_ids = st.text(
    alphabet=st.characters(whitelist_categories=("Ll", "Nd")), min_size=1, max_size=20,
)


def _build(drawn, global_discount):
    items = [
        make_line(f"SKU-{i}", qty, usd(price), usd(discount))
        for i, (qty, price, discount) in enumerate(drawn)
    ]
    if not isinstance(global_discount, Money):
        global_discount = usd(global_discount)
    return make_order(items=items, global_discount=global_discount)


class TestOrderTotals:
    @given(drawn=lines, global_discount=amounts)
    @settings(max_examples=200)
    def test_total_is_exact_sum(self, drawn, global_discount):
        order = _build(drawn, global_discount)
        expected = sum(
            (price * qty - discount for qty, price, discount in drawn), Decimal("0")
        ) - global_discount
        assert order.total_amount == usd(expected)

    @given(drawn=lines, global_discount=amounts)
    @settings(max_examples=100)
    def test_total_survives_mapper(self, drawn, global_discount):
        order = _build(drawn, global_discount)
        rows = OrderMapper.to_persistence(order)
        loaded = OrderMapper.to_domain(rows.order_row, rows.item_rows, rows.address_row)
        assert loaded.total_amount == order.total_amount
        assert loaded.items == order.items

    @given(drawn=lines, currency=st.sampled_from(["EUR", "GBP", "JPY"]))
    @settings(max_examples=50)
    def test_foreign_discount_always_rejected(self, drawn, currency):
        with pytest.raises(CurrencyMismatchError):
            _build(drawn, Money("1", currency))


def _storable(amount: Decimal) -> bool:
    return amount == amount.quantize(MINOR_UNIT)


async def _save_and_load(order):
    with tempfile.TemporaryDirectory() as tmp:
        engine = create_engine(f"sqlite+aiosqlite:///{Path(tmp) / 'orders.db'}")
        try:
            await create_all(engine)
            repo = SqlAlchemyOrderRepository(create_session_factory(engine))
            await repo.save(order)
            return await repo.find_by_id(order.order_id)
        finally:
            await engine.dispose()


class TestRepositoryRoundTrip:
    @given(drawn=lines, global_discount=amounts)
    @settings(max_examples=25, deadline=None)
    def test_every_field_survives_storage(self, drawn, global_discount):
        order = _build(drawn, global_discount)

        loaded = asyncio.run(_save_and_load(order))

        assert loaded.items == order.items
        assert loaded.global_discount == order.global_discount
        assert loaded.total_amount == order.total_amount
        assert loaded.shipping_address == order.shipping_address
        assert loaded.status == order.status

    @given(quantity=st.integers(min_value=1, max_value=50), price=any_scale_amounts)
    @settings(max_examples=25, deadline=None)
    def test_unstorable_amounts_never_enter_an_order(self, quantity, price):
        if not _storable(price):
            with pytest.raises(InvalidMoneyError):
                usd(price)
            return

        order = make_order(items=[make_line("SKU", quantity, usd(price))])
        loaded = asyncio.run(_save_and_load(order))
        assert loaded.items == order.items
        assert loaded.total_amount == order.total_amount


class TestPaymentState:
    @given(first=payment_ids, second=payment_ids)
    @settings(max_examples=100)
    def test_second_payment_never_overwrites_first(self, first, second):
        order = make_order()
        order.mark_as_paid(first)

        with pytest.raises(OrderAlreadyPaidError):
            order.mark_as_paid(second)

        assert order.status.is_paid()
        assert order.payment_id == first
