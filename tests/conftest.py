"""Shared fixtures for the order-management test suite."""

from __future__ import annotations

import pytest
import pytest_asyncio

from order_management.bus.message_bus import InMemoryMessageBus
from order_management.domain.cart import ShoppingCart
from order_management.domain.order import Order
from order_management.domain.pricing import StaticPricingGateway
from order_management.domain.value_objects import CustomerId, ProductId, Quantity, ShippingAddress
from order_management.storage.memory import (
    InMemoryOrderRepository,
    InMemoryShoppingCartRepository,
)
from order_management.storage.postgres.connection import (
    create_all,
    create_engine,
    create_session_factory,
)
from order_management.storage.postgres.repos import SqlAlchemyOrderRepository

from factories import make_address, make_line, make_order, usd


# ---------------------------------------------------------------------------
# Domain
# ---------------------------------------------------------------------------

@pytest.fixture
def shipping_address() -> ShippingAddress:
    return make_address()


@pytest.fixture
def order() -> Order:
    """A freshly placed one-line order (100.00 USD)."""
    return make_order()


@pytest.fixture
def three_line_order() -> Order:
    """2x50 + 1x30 + (3x20 - 5) - 10 = 175.00 USD."""
    return make_order(
        customer_id=CustomerId.from_string("customer-456"),
        items=[
            make_line("PRODUCT-A", 2, usd("50.00")),
            make_line("PRODUCT-B", 1, usd("30.00")),
            make_line("PRODUCT-C", 3, usd("20.00"), usd("5.00")),
        ],
        global_discount=usd("10.00"),
    )


@pytest.fixture
def cart() -> ShoppingCart:
    cart = ShoppingCart.create(CustomerId.from_string("customer-123"))
    cart.add_item(ProductId.from_string("PRODUCT-A"), Quantity.of(2))
    cart.add_item(ProductId.from_string("PRODUCT-B"), Quantity.of(1))
    return cart


@pytest.fixture
def pricing() -> StaticPricingGateway:
    return StaticPricingGateway(
        {
            "PRODUCT-A": usd("50.00"),
            "PRODUCT-B": usd("30.00"),
            "PRODUCT-C": usd("20.00"),
        },
        product_discounts={"PRODUCT-C": usd("5.00")},
    )


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------

@pytest.fixture
def bus() -> InMemoryMessageBus:
    return InMemoryMessageBus()


@pytest.fixture
def memory_orders() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def memory_carts() -> InMemoryShoppingCartRepository:
    return InMemoryShoppingCartRepository()


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}"


@pytest_asyncio.fixture
async def engine(database_url):
    eng = create_engine(database_url)
    await create_all(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def order_repo(session_factory) -> SqlAlchemyOrderRepository:
    return SqlAlchemyOrderRepository(session_factory)
