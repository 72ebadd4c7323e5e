"""Unit tests for CLI argument parsing and output formatting."""
from __future__ import annotations

import argparse
import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from portfolio_engine.cli import (
    _display,
    _run,
    build_parser,
    format_bulk,
    format_portfolio,
    format_total,
)
from portfolio_engine.config import AppConfig
from portfolio_engine.exceptions import ForbiddenError
from portfolio_engine.models import (
    AccountPortfolio,
    Asset,
    BulkPortfolioResult,
    PlatformTotal,
    PortfolioResult,
)


def _portfolio() -> PortfolioResult:
    return PortfolioResult.from_assets(
        [
            Asset("Stellar", "XLM", "stellar", Decimal("100"), Decimal("0.1"), Decimal("10")),
            Asset("Ripple", "XRP", "ripple", Decimal("50"), Decimal("0.5"), Decimal("25")),
        ]
    )


class TestBuildParser:
    def test_value_command(self) -> None:
        args = build_parser().parse_args(["value", "alice"])
        assert args.command == "value"
        assert args.account_id == "alice"

    def test_value_all_command(self) -> None:
        args = build_parser().parse_args(["value-all", "ops"])
        assert args.command == "value-all"
        assert args.requesting_id == "ops"

    def test_total_command(self) -> None:
        args = build_parser().parse_args(["total", "ops"])
        assert args.command == "total"
        assert args.requesting_id == "ops"

    def test_config_flag(self) -> None:
        args = build_parser().parse_args(["--config", "/tmp/c.yaml", "value", "a"])
        assert args.config == "/tmp/c.yaml"

    def test_log_level_flag(self) -> None:
        args = build_parser().parse_args(["--log-level", "DEBUG", "value", "a"])
        assert args.log_level == "DEBUG"

    def test_json_flag(self) -> None:
        args = build_parser().parse_args(["--json", "total", "ops"])
        assert args.json is True

    def test_no_command(self) -> None:
        args = build_parser().parse_args([])
        assert args.command is None


class TestFormatting:
    def test_display_truncates(self) -> None:
        assert _display(Decimal("1.99999")) == "1.9999"
        assert _display(Decimal("1234.5")) == "1,234.5000"

    def test_portfolio_lists_assets_in_order(self) -> None:
        text = format_portfolio(_portfolio())
        lines = text.splitlines()
        assert lines[0].startswith("XRP")
        assert lines[1].startswith("XLM")
        assert lines[-1] == "Total: $35.0000"

    def test_empty_portfolio(self) -> None:
        assert "No holdings found." in format_portfolio(PortfolioResult())

    def test_bulk(self) -> None:
        bulk = BulkPortfolioResult((AccountPortfolio("a1", "alice", _portfolio()),))
        text = format_bulk(bulk)
        assert "alice (a1)" in text
        assert "  Total: $35.0000" in text

    def test_empty_bulk(self) -> None:
        assert format_bulk(BulkPortfolioResult()) == "No accounts with addresses found."

    def test_total(self) -> None:
        text = format_total(PlatformTotal(Decimal("35"), 2))
        assert "Accounts: 2" in text
        assert "$35.0000" in text


class TestRun:
    def _args(self, *argv: str) -> argparse.Namespace:
        return build_parser().parse_args(list(argv))

    @pytest.mark.asyncio
    async def test_value_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        aggregator = MagicMock()
        aggregator.value_account = AsyncMock(return_value=_portfolio())

        with patch("portfolio_engine.cli.load_config", return_value=AppConfig()), \
             patch("portfolio_engine.cli.configure_logging"), \
             patch("portfolio_engine.cli.build_aggregator", return_value=aggregator):
            code = await _run(self._args("--json", "value", "alice"))

        assert code == 0
        aggregator.value_account.assert_awaited_once_with("alice")
        out = json.loads(capsys.readouterr().out)
        assert out["totalValue"] == 35.0
        assert [a["symbol"] for a in out["assets"]] == ["XRP", "XLM"]

    @pytest.mark.asyncio
    async def test_forbidden_returns_error_code(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        aggregator = MagicMock()
        aggregator.total_value = AsyncMock(side_effect=ForbiddenError("alice"))

        with patch("portfolio_engine.cli.load_config", return_value=AppConfig()), \
             patch("portfolio_engine.cli.configure_logging"), \
             patch("portfolio_engine.cli.build_aggregator", return_value=aggregator):
            code = await _run(self._args("total", "alice"))

        assert code == 1
        assert "not permitted" in capsys.readouterr().err
