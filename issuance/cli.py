"""Command-line interface for inspecting an issuance deployment."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import DeploymentConfig, load_config
from .errors import IssuanceLedgerError
from .logging_setup import configure_logging
from .oracles import OracleValidator, feed_bindings
from .services import ConversionEngine


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="issuance-ledger",
        description="Oracle-priced issuance and redemption ledger",
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

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("check", help="Validate configuration and print a summary")

    quote_parser = sub.add_parser(
        "quote", help="Price a deposit with a validated oracle quote"
    )
    quote_parser.add_argument("asset", help="Accepted asset identifier")
    quote_parser.add_argument(
        "amount", type=int, help="Deposit amount in the asset's raw units"
    )

    return parser


def _print_summary(config: DeploymentConfig) -> None:
    print(f"Token:           {config.token.name} ({config.token.symbol})")
    print(f"Issuance cap:    {config.issuance_cap}")
    print(f"Conversion rate: {config.conversion_rate}")
    print(f"Treasury:        {config.treasury}")
    print("Accepted assets:")
    for a in config.assets:
        guard = "yes" if a.liveness_guard else "no"
        print(
            f"  - {a.asset}: {a.decimals} decimals, feed {a.feed.url} "
            f"({a.feed.decimals} decimals), staleness {a.staleness_threshold}s, "
            f"liveness guard {guard}"
        )


async def _quote(config: DeploymentConfig, asset: str, amount: int) -> None:
    asset_cfg = config.asset(asset)
    if asset_cfg is None:
        raise SystemExit(f"Asset '{asset}' is not configured")

    engine = ConversionEngine(
        validator=OracleValidator(),
        bindings=feed_bindings(config),
        asset_decimals={a.asset: a.decimals for a in config.assets},
        conversion_rate=config.conversion_rate,
        issuance_cap=config.issuance_cap,
    )

    value = await engine.asset_to_value(asset, amount)
    tokens = engine.value_to_tokens(value)

    print(f"Asset:  {amount} {asset} ({asset_cfg.decimals} decimals)")
    print(f"Value:  {value} (18 decimals)")
    print(f"Tokens: {tokens}")


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "check":
        _print_summary(config)
    elif args.command == "quote":
        await _quote(config, args.asset, args.amount)
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        asyncio.run(_run(args))
    except (IssuanceLedgerError, ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
