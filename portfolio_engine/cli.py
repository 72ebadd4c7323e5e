"""Command-line interface for the portfolio valuation engine."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from decimal import ROUND_DOWN, Decimal

from .config import load_config
from .exceptions import AccountNotFoundError, ForbiddenError
from .http import HttpClient
from .logging_setup import configure_logging
from .models import BulkPortfolioResult, PlatformTotal, PortfolioResult
from .services import build_aggregator
from .stores import stores_from_config

DISPLAY_PLACES = Decimal("0.0001")


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="portfolio-engine",
        description="Multi-chain portfolio valuation",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of a table",
    )

    sub = parser.add_subparsers(dest="command")

    value_parser = sub.add_parser("value", help="Value a single account")
    value_parser.add_argument("account_id", help="Account to value")

    all_parser = sub.add_parser("value-all", help="Value every account (operator only)")
    all_parser.add_argument("requesting_id", help="Operator account making the request")

    total_parser = sub.add_parser("total", help="Platform-wide total value (operator only)")
    total_parser.add_argument("requesting_id", help="Operator account making the request")

    return parser


def _display(amount: Decimal) -> str:
    """Truncate (never round up) to four fractional digits."""
    return f"{amount.quantize(DISPLAY_PLACES, rounding=ROUND_DOWN):,}"


def format_portfolio(portfolio: PortfolioResult, indent: str = "") -> str:
    if not portfolio.assets:
        return f"{indent}No holdings found.\n{indent}Total: $0.0000"
    lines = [
        f"{indent}{a.symbol:<6} {a.chain:<10} {_display(a.quantity):>22}  ${_display(a.value)}"
        for a in portfolio.assets
    ]
    lines.append(f"{indent}Total: ${_display(portfolio.total_value)}")
    return "\n".join(lines)


def format_bulk(bulk: BulkPortfolioResult) -> str:
    if not bulk.portfolios:
        return "No accounts with addresses found."
    sections = [
        f"━━ {p.username or p.account_id} ({p.account_id}) ━━\n"
        + format_portfolio(p.portfolio, indent="  ")
        for p in bulk.portfolios
    ]
    return "\n\n".join(sections)


def format_total(total: PlatformTotal) -> str:
    return (
        f"Accounts: {total.account_count}\n"
        f"Total portfolio value: ${_display(total.total_value)}"
    )


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command and return the exit code."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    accounts, phrases = stores_from_config(config)

    async with HttpClient(timeout=config.engine.request_timeout) as http:
        aggregator = build_aggregator(config, http, accounts, phrases)
        try:
            if args.command == "value":
                result = await aggregator.value_account(args.account_id)
                text = format_portfolio(result)
            elif args.command == "value-all":
                result = await aggregator.value_all(args.requesting_id)
                text = format_bulk(result)
            elif args.command == "total":
                result = await aggregator.total_value(args.requesting_id)
                text = format_total(result)
            else:
                build_parser().print_help()
                return 1
        except (AccountNotFoundError, ForbiddenError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    print(json.dumps(result.to_dict(), indent=2) if args.json else text)
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
