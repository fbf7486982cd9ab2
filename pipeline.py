"""Request/response operations of the momentum-to-strategy pipeline.

Each operation returns an ``OperationResult`` whose status separates bad input
(400), unavailable upstream data (503, retryable by the caller) and internal
failures (500). Nothing is retried here and nothing partial is returned.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from analysis import catalog
from analysis.analyzer import TechnicalAnalyzer
from analysis.execution import ExecutionPlanner, plan_response_body
from analysis.models import TokenMarketData
from analysis.pricing import CrossChainPriceSynthesizer
from analysis.strategy import ESTIMATED_RETURNS, STRATEGY_RISKS, TIMELINE, StrategyBuilder
from constants import (
    DATA_SOURCE_COINGECKO,
    DATA_SOURCE_COINGECKO_BINANCE,
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
from errors import ClientInputError, InternalError, UpstreamUnavailableError
from scanner import MomentumScanner, snapshots_from_markets
from services.binance_client import BinanceClient
from services.coingecko_client import CoinGeckoClient

logger = logging.getLogger(__name__)

UPSTREAM_ERROR_MESSAGE = "Failed to fetch live market data. Please try again later."
UPSTREAM_FALLBACK_HINT = "API temporarily unavailable"


@dataclass(frozen=True)
class OperationResult:
    status: int
    body: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status == 200


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class MomentumPipeline:
    def __init__(
        self,
        coingecko_client: CoinGeckoClient,
        binance_client: Optional[BinanceClient] = None,
        scanner: Optional[MomentumScanner] = None,
        analyzer: Optional[TechnicalAnalyzer] = None,
        pricer: Optional[CrossChainPriceSynthesizer] = None,
        strategy_builder: Optional[StrategyBuilder] = None,
        planner: Optional[ExecutionPlanner] = None,
        clock: Callable[[], str] = _timestamp,
    ):
        self.coingecko_client = coingecko_client
        self.binance_client = binance_client
        self.scanner = scanner or MomentumScanner()
        self.analyzer = analyzer or TechnicalAnalyzer()
        self.pricer = pricer or CrossChainPriceSynthesizer()
        self.strategy_builder = strategy_builder or StrategyBuilder()
        self.planner = planner or ExecutionPlanner()
        self.clock = clock

    async def _run(self, action: str, operation: Callable[[], Awaitable[Dict[str, Any]]]) -> OperationResult:
        try:
            body = await operation()
        except ClientInputError as e:
            logger.warning("%s rejected: %s", action, e)
            return OperationResult(ClientInputError.status, {'error': str(e)})
        except UpstreamUnavailableError as e:
            logger.warning("%s failed, upstream unavailable: %s", action, e)
            return OperationResult(UpstreamUnavailableError.status, {
                'error': UPSTREAM_ERROR_MESSAGE,
                'fallback': UPSTREAM_FALLBACK_HINT,
                'details': str(e),
            })
        except Exception as e:
            logger.exception("Unexpected error during %s", action)
            return OperationResult(InternalError.status, {
                'error': f"Failed to {action}",
                'details': str(e) or e.__class__.__name__,
            })
        body['timestamp'] = self.clock()
        return OperationResult(200, body)

    async def scan(
        self,
        threshold: float = DEFAULT_SCAN_THRESHOLD,
        timeframe: str = DEFAULT_SCAN_TIMEFRAME,
    ) -> OperationResult:
        async def operation() -> Dict[str, Any]:
            rows = await self.coingecko_client.get_markets()
            result = self.scanner.scan(snapshots_from_markets(rows), threshold, timeframe)
            return {
                'threshold': f"{threshold:g}%",
                'timeframe': timeframe,
                'momentumDetected': result.momentum_detected,
                'tokens': [token.to_dict() for token in result.tokens],
                'summary': result.summary,
                'dataSource': DATA_SOURCE_COINGECKO,
            }

        return await self._run("detect momentum", operation)

    async def analyze(
        self,
        token: str = DEFAULT_TOKEN,
        timeframes: Sequence[str] = DEFAULT_ANALYSIS_TIMEFRAMES,
    ) -> OperationResult:
        async def operation() -> Dict[str, Any]:
            symbol = token.upper()
            coin_id = catalog.coingecko_id(symbol)
            if not coin_id:
                raise ClientInputError(f"Token {token} not supported")

            coin = await self.coingecko_client.get_coin_by_id(coin_id)
            market_block = coin.get('market_data')
            if not market_block:
                raise ClientInputError(f"Market data for {token} not available")

            market_data = TokenMarketData.from_coingecko_coin(symbol, market_block)
            body = self.analyzer.analyze(market_data, timeframes).to_dict()
            body['dataSource'] = DATA_SOURCE_COINGECKO
            return body

        return await self._run("analyze momentum", operation)

    async def price(
        self,
        token: str = DEFAULT_TOKEN,
        chains: Sequence[str] = DEFAULT_PRICE_CHAINS,
    ) -> OperationResult:
        async def operation() -> Dict[str, Any]:
            symbol = token.upper()
            coin_id = catalog.coingecko_id(symbol)
            if not coin_id:
                raise ClientInputError(f"Token {token} not supported")

            price_data = await self.coingecko_client.get_simple_price(coin_id)
            if not price_data or price_data.get('usd') is None:
                raise ClientInputError(f"Price data for {token} not available")

            base_price = price_data['usd']
            volume_24h = price_data.get('usd_24h_vol') or 0.0
            prices = self.pricer.synthesize(symbol, base_price, volume_24h, chains)

            binance_data = None
            binance_symbol = catalog.binance_symbol(symbol)
            if self.binance_client and binance_symbol:
                binance_data = await self.binance_client.get_24h_ticker(binance_symbol)

            return {
                'token': prices.token,
                'chains': {chain: quote.to_dict() for chain, quote in prices.quotes.items()},
                'arbitrage': prices.arbitrage.to_dict(),
                'marketData': {
                    'basePrice': base_price,
                    'volume24h': volume_24h,
                    'change24h': price_data.get('usd_24h_change') or 0.0,
                    'binanceData': binance_data,
                },
                'dataSource': DATA_SOURCE_COINGECKO_BINANCE,
            }

        return await self._run("fetch cross-chain prices", operation)

    async def build_strategy(
        self,
        token: str = DEFAULT_TOKEN,
        budget: float = DEFAULT_BUDGET,
        risk_level: str = DEFAULT_RISK_LEVEL,
        chains: Sequence[str] = DEFAULT_PRICE_CHAINS,
    ) -> OperationResult:
        async def operation() -> Dict[str, Any]:
            strategy = self.strategy_builder.build(token, budget, risk_level, chains)
            body = strategy.to_dict()
            body.update({
                'estimatedReturns': dict(ESTIMATED_RETURNS),
                'timeline': TIMELINE,
                'risks': list(STRATEGY_RISKS),
            })
            return body

        return await self._run("create momentum strategy", operation)

    async def plan(
        self,
        strategy: Optional[str],
        token: str = DEFAULT_TOKEN,
        chains: Sequence[str] = DEFAULT_PLAN_CHAINS,
        amounts: Sequence[str] = DEFAULT_PLAN_AMOUNTS,
    ) -> OperationResult:
        async def operation() -> Dict[str, Any]:
            execution_plan = self.planner.plan(strategy, token, chains, amounts)
            return plan_response_body(execution_plan)

        return await self._run("execute momentum trade", operation)
