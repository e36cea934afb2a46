"""CLI entry point for the order-management backend."""

from __future__ import annotations

import asyncio

import click

from .core.config import Settings, load_settings
from .observability.logger import get_logger, new_correlation_id, setup_logging_from_config


def _settings(config: str | None, database_url: str | None) -> Settings:
    overrides: dict = {}
    if database_url:
        overrides["database_url"] = database_url
    settings = load_settings(config_path=config, overrides=overrides)
    setup_logging_from_config(settings.observability)
    return settings


@click.group()
def main() -> None:
    """Order management: carts, orders, payments."""


@main.command("init-db")
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--database-url", default=None, help="Override the database URL")
def init_db(config: str | None, database_url: str | None) -> None:
    """Create the shipping_addresses, orders and order_items tables."""
    settings = _settings(config, database_url)
    asyncio.run(_init_db(settings))
    click.echo("Tables created / verified.")


async def _init_db(settings: Settings) -> None:
    from .storage.postgres import create_all, create_engine

    engine = create_engine(settings.database_url, settings.database)
    try:
        await create_all(engine)
    finally:
        await engine.dispose()


@main.command()
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--database-url", default=None, help="Override the database URL")
@click.option("--sku", default="TEST-SKU-001", help="Product to order")
@click.option("--quantity", default=1, type=int, help="Units to order")
@click.option("--price", default="100.00", help="Unit price")
@click.option("--payment-id", default="payment-123", help="Payment id to confirm with")
def demo(
    config: str | None,
    database_url: str | None,
    sku: str,
    quantity: int,
    price: str,
    payment_id: str,
) -> None:
    """Check out a one-line cart and confirm its payment through the bus."""
    settings = _settings(config, database_url)
    order = asyncio.run(_demo(settings, sku, quantity, price, payment_id))
    click.echo(
        f"Order {order.order_id}: status={order.status} payment_id={order.payment_id} "
        f"total={order.total_amount}"
    )


async def _demo(settings: Settings, sku: str, quantity: int, price: str, payment_id: str):
    from .application import OrdersService, PaymentsService
    from .bus import InMemoryMessageBus
    from .domain import CustomerId, Money, ProductId, Quantity, ShippingAddress, ShoppingCart
    from .domain.pricing import StaticPricingGateway
    from .storage.memory import InMemoryShoppingCartRepository
    from .storage.postgres import (
        SqlAlchemyOrderRepository,
        create_all,
        create_engine,
        create_session_factory,
    )

    log = get_logger(__name__)
    log.info("demo started", correlation_id=new_correlation_id())

    engine = create_engine(settings.database_url, settings.database)
    bus = InMemoryMessageBus()
    try:
        await create_all(engine)
        orders = SqlAlchemyOrderRepository(create_session_factory(engine))
        carts = InMemoryShoppingCartRepository()
        pricing = StaticPricingGateway({sku: Money(price, settings.default_currency)})

        service = OrdersService(orders, carts, pricing, bus)
        payments = PaymentsService(bus)
        service.register()
        payments.register()

        cart = ShoppingCart.create(CustomerId.from_string("demo-customer"))
        cart.add_item(ProductId.from_string(sku), Quantity.of(quantity))
        await carts.save(cart)

        order = await service.checkout(
            cart.cart_id,
            ShippingAddress(
                street="123 Main St",
                city="Springfield",
                state_or_province="IL",
                postal_code="62701",
                country="USA",
            ),
        )
        await bus.drain()

        await payments.confirm(str(order.order_id), payment_id)
        await bus.drain()

        loaded = await orders.find_by_id(order.order_id)
        log.info("demo finished", order_id=str(order.order_id), status=str(loaded.status))
        return loaded
    finally:
        await bus.stop()
        await engine.dispose()
