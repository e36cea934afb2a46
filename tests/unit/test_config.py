"""Tests for settings loading."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from order_management.core.config import Settings, load_settings
from order_management.core.errors import ConfigError


def test_defaults():
    settings = Settings()
    assert settings.database_url.startswith("postgresql+asyncpg://")
    assert settings.default_currency == "USD"
    assert settings.database.pool_size == 5
    assert settings.observability.log_format == "json"


def test_load_from_toml(tmp_path):
    path = tmp_path / "orders.toml"
    path.write_text(
        'database_url = "sqlite+aiosqlite:///orders.db"\n'
        'default_currency = "eur"\n'
        "\n"
        "[database]\n"
        "echo = true\n"
        "\n"
        "[observability]\n"
        'log_format = "console"\n'
    )

    settings = load_settings(path)

    assert settings.database_url == "sqlite+aiosqlite:///orders.db"
    assert settings.default_currency == "EUR"
    assert settings.database.echo is True
    assert settings.observability.log_format == "console"


def test_overrides_win_over_file(tmp_path):
    path = tmp_path / "orders.toml"
    path.write_text('database_url = "sqlite+aiosqlite:///a.db"\n')

    settings = load_settings(path, overrides={"database_url": "sqlite+aiosqlite:///b.db"})
    assert settings.database_url == "sqlite+aiosqlite:///b.db"


def test_env_vars(monkeypatch):
    monkeypatch.setenv("ORDERS_DATABASE_URL", "sqlite+aiosqlite:///env.db")
    monkeypatch.setenv("ORDERS_DATABASE__POOL_SIZE", "7")

    settings = load_settings()

    assert settings.database_url == "sqlite+aiosqlite:///env.db"
    assert settings.database.pool_size == 7


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "nope.toml")


def test_bad_currency():
    with pytest.raises(ValidationError):
        Settings(default_currency="EURO")
