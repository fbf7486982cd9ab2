# bot/handlers.py
import html
from typing import Optional

from telegram import Update
from telegram.ext import ContextTypes

from config import split_csv
from constants import (
    DEFAULT_ANALYSIS_TIMEFRAMES,
    DEFAULT_BUDGET,
    DEFAULT_PLAN_AMOUNTS,
    DEFAULT_PLAN_CHAINS,
    DEFAULT_PRICE_CHAINS,
    DEFAULT_RISK_LEVEL,
    DEFAULT_SCAN_THRESHOLD,
    DEFAULT_SCAN_TIMEFRAME,
    DEFAULT_TOKEN,
)
from pipeline import MomentumPipeline, OperationResult


def _arg(context: ContextTypes.DEFAULT_TYPE, index: int) -> Optional[str]:
    args = context.args or []
    return args[index] if index < len(args) else None


def _parse_float(value: Optional[str], default: float) -> Optional[float]:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return None


def format_error(result: OperationResult) -> str:
    message = f"⚠️ {html.escape(result.body.get('error', 'Request failed'))}"
    if result.status == 503:
        message += "\nThe market data provider is unavailable, try again shortly."
    elif result.status >= 500 and result.body.get('details'):
        message += f"\n<pre>{html.escape(result.body['details'])}</pre>"
    return message


def format_scan(body: dict) -> str:
    lines = [f"<b>🚀 Momentum Scan</b> ({body['threshold']} / {body['timeframe']})", html.escape(body['summary']), ""]
    for idx, token in enumerate(body['tokens'], start=1):
        lines.append(
            f"{idx}. <b>{html.escape(token['token'])}</b> score <code>{token['momentumScore']:.1f}</code> "
            f"({token['trend']}) 24h {token['change24h']:+.2f}%"
        )
    return "\n".join(lines)


def format_analysis(body: dict) -> str:
    tech = body['technicals']
    lines = [
        f"<b>📈 {html.escape(body['token'])} Momentum</b>",
        f"Score: <code>{body['momentumScore']}</code> | Status: {body['status']}",
        f"Recommendation: <b>{body['recommendation']}</b> | Risk: {body['riskLevel']}",
        f"RSI: {tech['rsi']:.0f} | Volume: {tech['volumeProfile']} | Flow: {tech['crossChainFlow']}",
        f"Sentiment: {tech['socialSentiment']:.2f}",
    ]
    for timeframe, obs in body['timeframes'].items():
        lines.append(f"• {timeframe}: {obs['change']:+.2f}% ({obs['trend']})")
    return "\n".join(lines)


def format_prices(body: dict) -> str:
    lines = [f"<b>🌉 {html.escape(body['token'])} Cross-Chain Prices</b>"]
    for chain, quote in body['chains'].items():
        lines.append(f"• {chain} ({html.escape(quote['symbol'])} on {quote['dex']}): ${quote['price']:,.4f}")
    arb = body['arbitrage']
    verdict = "profitable" if arb['profitable'] else "below threshold"
    lines.append(f"\nSpread {arb['opportunity']}: buy {arb['buyChain']}, sell {arb['sellChain']} ({verdict})")
    return "\n".join(lines)


def format_strategy(body: dict) -> str:
    strategy = body['strategy']
    exit_plan = strategy['exitStrategy']
    lines = [
        f"<b>🧭 {html.escape(body['token'])} Strategy</b> ({body['riskLevel']} risk)",
        f"Budget: ${body['budget']:,.2f} | Max position: ${body['maxPosition']:,.2f}",
    ]
    for chain in strategy['executionOrder']:
        entry = strategy['allocation'][chain]
        lines.append(f"• {chain}: {entry['percentage']}% = ${entry['amount']:,.2f} {html.escape(entry['symbol'])}")
    lines.append(
        f"Exit: +{exit_plan['profitTarget']}% target, -{exit_plan['stopLoss']}% stop, {exit_plan['timeLimit']} limit"
    )
    return "\n".join(lines)


def format_plan(body: dict) -> str:
    plan = body['executionPlan']
    lines = [f"<b>🛠 Execution Plan</b> <code>{plan['tradeId']}</code>"]
    for trade in plan['trades']:
        lines.append(
            f"{trade['priority']}. {trade['action']} {trade['amount']} {html.escape(trade['symbol'])} "
            f"on {trade['chain']} via {trade['dex']} (gas {trade['estimatedGas']}, slip {trade['expectedSlippage']})"
        )
    return "\n".join(lines)


async def _reply(update: Update, result: OperationResult, formatter) -> None:
    text = formatter(result.body) if result.ok else format_error(result)
    await update.message.reply_html(text)


def _pipeline(context: ContextTypes.DEFAULT_TYPE) -> MomentumPipeline:
    return context.application.bot_data['pipeline']


# --- Command Handlers ---

async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Displays a help message with all available commands."""
    help_text = """
    <b>Welcome to the Momentum Bridge Bot!</b>

    Detects token momentum and turns it into a cross-chain plan.

    <b><u>Available Commands:</u></b>
    /scan [threshold] [1h|24h|7d] - Top momentum tokens
    /analyze [token] [1h,4h,24h] - Multi-timeframe analysis
    /price [token] [chains] - Cross-chain prices and arbitrage
    /strategy [token] [budget] [low|medium|high] [chains] - Allocation plan
    /plan &lt;strategy&gt; [token] [chains] [amounts] - Execution steps
    /help - Show this help message
    """
    await update.message.reply_html(help_text)


async def scan_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    threshold = _parse_float(_arg(context, 0), DEFAULT_SCAN_THRESHOLD)
    if threshold is None:
        await update.message.reply_text("Threshold must be a number, e.g. /scan 5 24h")
        return
    timeframe = _arg(context, 1) or DEFAULT_SCAN_TIMEFRAME
    result = await _pipeline(context).scan(threshold, timeframe)
    await _reply(update, result, format_scan)


async def analyze_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    token = _arg(context, 0) or DEFAULT_TOKEN
    timeframes_arg = _arg(context, 1)
    timeframes = split_csv(timeframes_arg) if timeframes_arg else list(DEFAULT_ANALYSIS_TIMEFRAMES)
    result = await _pipeline(context).analyze(token, timeframes)
    await _reply(update, result, format_analysis)


async def price_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    token = _arg(context, 0) or DEFAULT_TOKEN
    chains_arg = _arg(context, 1)
    chains = split_csv(chains_arg) if chains_arg else list(DEFAULT_PRICE_CHAINS)
    result = await _pipeline(context).price(token, chains)
    await _reply(update, result, format_prices)


async def strategy_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    token = _arg(context, 0) or DEFAULT_TOKEN
    budget = _parse_float(_arg(context, 1), DEFAULT_BUDGET)
    if budget is None:
        await update.message.reply_text("Budget must be a number, e.g. /strategy BTC 2000 low ethereum,bsc")
        return
    risk_level = _arg(context, 2) or DEFAULT_RISK_LEVEL
    chains_arg = _arg(context, 3)
    chains = split_csv(chains_arg) if chains_arg else list(DEFAULT_PRICE_CHAINS)
    result = await _pipeline(context).build_strategy(token, budget, risk_level, chains)
    await _reply(update, result, format_strategy)


async def plan_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    strategy = _arg(context, 0)
    token = _arg(context, 1) or DEFAULT_TOKEN
    chains_arg = _arg(context, 2)
    amounts_arg = _arg(context, 3)
    chains = split_csv(chains_arg) if chains_arg else list(DEFAULT_PLAN_CHAINS)
    amounts = split_csv(amounts_arg) if amounts_arg else list(DEFAULT_PLAN_AMOUNTS)
    result = await _pipeline(context).plan(strategy, token, chains, amounts)
    await _reply(update, result, format_plan)
