#!/usr/bin/env python3
import os
import argparse
from typing import NamedTuple, Optional, Sequence
import constants

OPERATIONS = ('scan', 'analyze', 'price', 'strategy', 'plan')


class AppConfig(NamedTuple):
    """Typed configuration object."""
    telegram_enabled: bool
    telegram_bot_token: str | None
    coingecko_api_key: str | None
    request_timeout: float
    run: str | None
    threshold: float
    timeframe: str
    token: str
    timeframes: list[str]
    chains: list[str] | None
    budget: float
    risk_level: str
    strategy: str | None
    amounts: list[str]
    price_seed: int | None


def split_csv(value: str) -> list[str]:
    """Splits a comma separated CLI value, dropping blanks."""
    return [part.strip() for part in value.split(',') if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Detect token momentum and build cross-chain momentum strategies.",
        epilog="Example: ./main.py --run strategy --token BTC --budget 2000 --risk-level low --chains ethereum,bsc"
    )
    # --- Bot Arguments ---
    parser.add_argument('--telegram-enabled', action='store_true', help='Serve the pipeline as Telegram bot commands.')
    parser.add_argument('--request-timeout', type=float, default=constants.DEFAULT_REQUEST_TIMEOUT,
                        help=f'Upstream request timeout in seconds (default: {constants.DEFAULT_REQUEST_TIMEOUT:g}).')

    # --- One-shot Arguments ---
    parser.add_argument('--run', choices=OPERATIONS, help='Run a single operation, print its JSON response and exit.')
    parser.add_argument('--threshold', type=float, default=constants.DEFAULT_SCAN_THRESHOLD,
                        help='Minimum absolute percent change for scan (default: 5).')
    parser.add_argument('--timeframe', choices=list(constants.TIMEFRAME_CHANGE_FIELDS), default=constants.DEFAULT_SCAN_TIMEFRAME,
                        help='Change window used by scan (default: 24h).')
    parser.add_argument('--token', type=str, default=constants.DEFAULT_TOKEN, help='Token symbol (default: BTC).')
    parser.add_argument('--timeframes', type=split_csv, default=list(constants.DEFAULT_ANALYSIS_TIMEFRAMES),
                        help='Comma separated timeframes for analyze (default: 1h,4h,24h).')
    parser.add_argument('--chains', type=split_csv, help='Comma separated chains for price, strategy and plan.')
    parser.add_argument('--budget', type=float, default=constants.DEFAULT_BUDGET, help='Strategy budget in USD (default: 2000).')
    parser.add_argument('--risk-level', choices=['low', 'medium', 'high'], default=constants.DEFAULT_RISK_LEVEL,
                        help='Strategy risk tier (default: medium).')
    parser.add_argument('--strategy', type=str, help='Strategy reference required by plan.')
    parser.add_argument('--amounts', type=split_csv, default=list(constants.DEFAULT_PLAN_AMOUNTS),
                        help='Comma separated per-chain amounts for plan (default: 1000,500).')
    parser.add_argument('--price-seed', type=int, help='Seed the price noise generator for reproducible quotes.')
    return parser


def load_config(argv: Optional[Sequence[str]] = None) -> AppConfig:
    """
    Parses command-line arguments and loads environment variables to create a configuration object.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.telegram_enabled and not args.run:
        parser.error('either --run or --telegram-enabled is required.')

    # Load from environment
    telegram_bot_token = os.environ.get(constants.TELEGRAM_BOT_TOKEN_ENV_VAR)
    coingecko_api_key = os.environ.get(constants.COINGECKO_API_KEY_ENV_VAR)

    if args.telegram_enabled and not args.run and not telegram_bot_token:
        print(f"{constants.C_RED}Telegram is enabled, but {constants.TELEGRAM_BOT_TOKEN_ENV_VAR} is not set.{constants.C_RESET}")
        exit(1)

    if args.request_timeout <= 0:
        parser.error('--request-timeout must be positive.')

    return AppConfig(
        telegram_enabled=args.telegram_enabled,
        telegram_bot_token=telegram_bot_token,
        coingecko_api_key=coingecko_api_key,
        request_timeout=args.request_timeout,
        run=args.run,
        threshold=args.threshold,
        timeframe=args.timeframe,
        token=args.token.upper(),
        timeframes=args.timeframes,
        chains=args.chains,
        budget=args.budget,
        risk_level=args.risk_level,
        strategy=args.strategy,
        amounts=args.amounts,
        price_seed=args.price_seed,
    )
