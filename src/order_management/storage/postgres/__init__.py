"""Relational persistence for the Order aggregate (async SQLAlchemy)."""

from .connection import (
    create_all,
    create_engine,
    create_session_factory,
    drop_all,
    session_scope,
)
from .mapper import OrderMapper, OrderRows
from .repos import SqlAlchemyOrderRepository

__all__ = [
    "OrderMapper",
    "OrderRows",
    "SqlAlchemyOrderRepository",
    "create_all",
    "create_engine",
    "create_session_factory",
    "drop_all",
    "session_scope",
]
