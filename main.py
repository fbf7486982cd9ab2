#!/usr/bin/env python3
import asyncio
import json
import logging
import sys
import random

import aiohttp
from telegram import BotCommand
from telegram.ext import Application, CommandHandler
from telegram.error import TimedOut, TelegramError

import constants
from analysis.pricing import CrossChainPriceSynthesizer
from config import AppConfig, load_config
from bot.handlers import (
    help_command,
    scan_command,
    analyze_command,
    price_command,
    strategy_command,
    plan_command,
)
from pipeline import MomentumPipeline, OperationResult
from services.binance_client import BinanceClient
from services.coingecko_client import CoinGeckoClient

USER_AGENT = 'MomentumBridgeBot/1.0'


def build_pipeline(session: aiohttp.ClientSession, config: AppConfig) -> MomentumPipeline:
    """Wires the market-data clients and pipeline components for one session."""
    coingecko_client = CoinGeckoClient(session, config.coingecko_api_key, timeout=config.request_timeout)
    binance_client = BinanceClient(session, timeout=config.request_timeout)
    rng = random.Random(config.price_seed) if config.price_seed is not None else None
    return MomentumPipeline(
        coingecko_client,
        binance_client,
        pricer=CrossChainPriceSynthesizer(rng=rng),
    )


async def run_operation(pipeline: MomentumPipeline, config: AppConfig) -> OperationResult:
    """Dispatches the one-shot ``--run`` operation."""
    if config.run == 'scan':
        return await pipeline.scan(config.threshold, config.timeframe)
    if config.run == 'analyze':
        return await pipeline.analyze(config.token, config.timeframes)
    if config.run == 'price':
        return await pipeline.price(config.token, config.chains or list(constants.DEFAULT_PRICE_CHAINS))
    if config.run == 'strategy':
        return await pipeline.build_strategy(
            config.token,
            config.budget,
            config.risk_level,
            config.chains or list(constants.DEFAULT_PRICE_CHAINS),
        )
    if config.run == 'plan':
        return await pipeline.plan(
            config.strategy,
            config.token,
            config.chains or list(constants.DEFAULT_PLAN_CHAINS),
            config.amounts,
        )
    raise ValueError(f"Unknown operation: {config.run}")


async def run_once(config: AppConfig) -> OperationResult:
    async with aiohttp.ClientSession(headers={'User-Agent': USER_AGENT}) as session:
        pipeline = build_pipeline(session, config)
        return await run_operation(pipeline, config)


async def post_init_hook(application: Application) -> None:
    """A hook that runs after the bot is initialized to set up shared clients."""
    # Create and store a single, shared aiohttp session
    session = aiohttp.ClientSession(headers={'User-Agent': USER_AGENT})
    application.bot_data['http_session'] = session

    config = application.bot_data['config']
    application.bot_data['pipeline'] = build_pipeline(session, config)

    # Set bot commands
    commands = [
        BotCommand("scan", "Top momentum tokens"),
        BotCommand("analyze", "Multi-timeframe momentum analysis"),
        BotCommand("price", "Cross-chain prices and arbitrage"),
        BotCommand("strategy", "Risk-adjusted cross-chain allocation"),
        BotCommand("plan", "Execution plan for a strategy"),
        BotCommand("help", "Show help message"),
    ]
    try:
        await application.bot.set_my_commands(commands)
    except (TimedOut, TelegramError) as exc:
        print(
            f"{constants.C_YELLOW}Warning: unable to set Telegram bot commands ({exc})."
            f" Continuing startup without updating commands.{constants.C_RESET}"
        )


async def post_shutdown_hook(application: Application) -> None:
    """A hook that runs on application shutdown to clean up resources."""
    session = application.bot_data.get('http_session')
    if session:
        await session.close()


def main() -> None:
    """The main synchronous entry point for the application."""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    config = load_config()

    if config.run:
        result = asyncio.run(run_once(config))
        colour = constants.C_GREEN if result.ok else constants.C_RED
        print(f"{colour}{config.run}: HTTP {result.status}{constants.C_RESET}", file=sys.stderr)
        print(json.dumps(result.body, indent=2))
        if not result.ok:
            exit(1)
        return

    application = (
        Application.builder()
        .token(config.telegram_bot_token)
        .post_init(post_init_hook)
        .post_shutdown(post_shutdown_hook)
        .build()
    )

    # Store config for the post-init hook
    application.bot_data['config'] = config

    # Register command handlers
    application.add_handler(CommandHandler("start", help_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("scan", scan_command))
    application.add_handler(CommandHandler("analyze", analyze_command))
    application.add_handler(CommandHandler("price", price_command))
    application.add_handler(CommandHandler("strategy", strategy_command))
    application.add_handler(CommandHandler("plan", plan_command))

    print(f"{constants.C_BLUE}Momentum bot polling for commands...{constants.C_RESET}")
    application.run_polling()


if __name__ == "__main__":
    main()
