"""Tests for the click CLI."""

from __future__ import annotations

from click.testing import CliRunner

from order_management.cli import main


def _url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"


def test_init_db(tmp_path):
    result = CliRunner().invoke(main, ["init-db", "--database-url", _url(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "Tables created" in result.output
    assert (tmp_path / "cli.db").exists()


def test_demo_checks_out_and_pays(tmp_path):
    result = CliRunner().invoke(
        main,
        [
            "demo",
            "--database-url", _url(tmp_path),
            "--quantity", "2",
            "--price", "50.00",
            "--payment-id", "payment-789",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "status=paid" in result.output
    assert "payment_id=payment-789" in result.output
    assert "total=100.00 USD" in result.output


def test_missing_config_file(tmp_path):
    result = CliRunner().invoke(main, ["demo", "--config", str(tmp_path / "nope.toml")])
    assert result.exit_code != 0
