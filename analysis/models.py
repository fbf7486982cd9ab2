#!/usr/bin/env python3
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


def _or_zero(value: Optional[float]) -> float:
    return value if value is not None else 0.0


@dataclass(frozen=True)
class TokenSnapshot:
    """Market state of one token as reported by the market-data provider."""
    symbol: str
    name: str
    current_price: float
    volume_24h: float
    market_cap: float
    change_1h: Optional[float] = None
    change_24h: Optional[float] = None
    change_7d: Optional[float] = None
    # Headline 24h change; change_24h is the in-currency field used for filtering.
    headline_change_24h: Optional[float] = None

    @classmethod
    def from_coingecko_market(cls, row: Dict[str, Any]) -> 'TokenSnapshot':
        """Builds a snapshot from a CoinGecko /coins/markets row."""
        return cls(
            symbol=str(row.get('symbol', '')).upper(),
            name=row.get('name', ''),
            current_price=row.get('current_price') or 0.0,
            volume_24h=row.get('total_volume') or 0.0,
            market_cap=row.get('market_cap') or 0.0,
            change_1h=row.get('price_change_percentage_1h_in_currency'),
            change_24h=row.get('price_change_percentage_24h_in_currency'),
            change_7d=row.get('price_change_percentage_7d_in_currency'),
            headline_change_24h=row.get('price_change_percentage_24h'),
        )

    @property
    def reported_change_24h(self) -> Optional[float]:
        """24h change used for scoring and display."""
        if self.headline_change_24h is not None:
            return self.headline_change_24h
        return self.change_24h

    def change_for(self, timeframe: str) -> Optional[float]:
        return {
            '1h': self.change_1h,
            '24h': self.change_24h,
            '7d': self.change_7d,
        }.get(timeframe, self.change_24h)


@dataclass(frozen=True)
class MomentumResult:
    """A scanned token with its momentum score and trend bucket."""
    snapshot: TokenSnapshot
    score: float
    trend: str
    chains: Tuple[str, ...]

    @property
    def symbol(self) -> str:
        return self.snapshot.symbol

    def to_dict(self) -> Dict[str, Any]:
        snap = self.snapshot
        return {
            'token': snap.symbol,
            'name': snap.name,
            'change24h': _or_zero(snap.reported_change_24h),
            'change1h': _or_zero(snap.change_1h),
            'change7d': _or_zero(snap.change_7d),
            'price': snap.current_price,
            'volume24h': snap.volume_24h,
            'marketCap': snap.market_cap,
            'chains': list(self.chains),
            'momentumScore': self.score,
            'trend': self.trend,
        }


@dataclass(frozen=True)
class ScanResult:
    threshold: float
    timeframe: str
    tokens: Tuple[MomentumResult, ...]
    total_found: int

    @property
    def momentum_detected(self) -> bool:
        return self.total_found > 0

    @property
    def summary(self) -> str:
        return (
            f"Found {self.total_found} tokens with {self.threshold:g}%+ momentum "
            f"in {self.timeframe}"
        )


@dataclass(frozen=True)
class TokenMarketData:
    """Single-token market data used by the technical analysis."""
    symbol: str
    current_price: float
    market_cap: float
    volume_24h: float
    circulating_supply: float
    change_1h: Optional[float] = None
    change_24h: Optional[float] = None
    change_7d: Optional[float] = None
    price_history: Tuple[float, ...] = ()

    @classmethod
    def from_coingecko_coin(cls, symbol: str, market_data: Dict[str, Any]) -> 'TokenMarketData':
        """Builds market data from the ``market_data`` block of /coins/{id}."""
        def usd(key: str) -> Optional[float]:
            block = market_data.get(key)
            if isinstance(block, dict):
                return block.get('usd')
            return None

        sparkline = market_data.get('sparkline_7d') or {}
        return cls(
            symbol=symbol.upper(),
            current_price=usd('current_price') or 0.0,
            market_cap=usd('market_cap') or 0.0,
            volume_24h=usd('total_volume') or 0.0,
            circulating_supply=market_data.get('circulating_supply') or 0.0,
            change_1h=usd('price_change_percentage_1h_in_currency'),
            change_24h=usd('price_change_percentage_24h_in_currency'),
            change_7d=usd('price_change_percentage_7d_in_currency'),
            price_history=tuple(sparkline.get('price') or ()),
        )

    def change_for(self, timeframe: str) -> Optional[float]:
        # No 4h field is published by the provider.
        return {
            '1h': self.change_1h,
            '24h': self.change_24h,
            '7d': self.change_7d,
        }.get(timeframe)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'currentPrice': self.current_price,
            'marketCap': self.market_cap,
            'volume24h': self.volume_24h,
            'circulatingSupply': self.circulating_supply,
        }


@dataclass(frozen=True)
class TimeframeObservation:
    timeframe: str
    percent_change: float
    volume: float
    trend: str

    def to_dict(self) -> Dict[str, Any]:
        return {'change': self.percent_change, 'volume': self.volume, 'trend': self.trend}


@dataclass(frozen=True)
class TechnicalProfile:
    oscillator: float
    volume_profile: str
    cross_chain_flow: str
    sentiment: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rsi': self.oscillator,
            'volumeProfile': self.volume_profile,
            'crossChainFlow': self.cross_chain_flow,
            'socialSentiment': self.sentiment,
        }


@dataclass(frozen=True)
class MomentumAnalysis:
    """Multi-timeframe momentum analysis of a single token."""
    token: str
    momentum_score: float
    status: str
    recommendation: str
    risk_level: str
    timeframes: Dict[str, TimeframeObservation]
    technicals: TechnicalProfile
    market_data: TokenMarketData

    def to_dict(self) -> Dict[str, Any]:
        return {
            'token': self.token,
            'momentumScore': round(self.momentum_score, 1),
            'status': self.status,
            'recommendation': self.recommendation,
            'timeframes': {tf: obs.to_dict() for tf, obs in self.timeframes.items()},
            'technicals': self.technicals.to_dict(),
            'riskLevel': self.risk_level,
            'marketData': self.market_data.to_dict(),
        }


@dataclass(frozen=True)
class ChainPriceQuote:
    chain: str
    wrapped_symbol: str
    price: float
    slippage_percent: float
    venue: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.wrapped_symbol,
            'price': self.price,
            'slippage': self.slippage_percent,
            'dex': self.venue,
        }


@dataclass(frozen=True)
class ArbitrageOpportunity:
    """Best cross-chain spread for a token across a quote set."""
    spread_percent: float
    buy_chain: str
    sell_chain: str
    profitable: bool
    min_spread: str = '0.5%'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'opportunity': f"{self.spread_percent:.2f}%",
            'spreadPercent': self.spread_percent,
            'buyChain': self.buy_chain,
            'sellChain': self.sell_chain,
            'profitable': self.profitable,
            'minSpread': self.min_spread,
        }


@dataclass(frozen=True)
class CrossChainPrices:
    token: str
    quotes: Dict[str, ChainPriceQuote]
    arbitrage: ArbitrageOpportunity


@dataclass(frozen=True)
class AllocationEntry:
    percentage: float
    amount: float
    wrapped_symbol: str
    rationale: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'percentage': self.percentage,
            'amount': self.amount,
            'symbol': self.wrapped_symbol,
            'reasoning': self.rationale,
        }


@dataclass(frozen=True)
class ExitPlan:
    profit_target_percent: float
    stop_loss_percent: float
    time_limit: str
    partial_exit_schedule: Tuple[Tuple[str, str], ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'profitTarget': self.profit_target_percent,
            'stopLoss': self.stop_loss_percent,
            'timeLimit': self.time_limit,
            'partialExit': dict(self.partial_exit_schedule),
        }


@dataclass(frozen=True)
class MomentumStrategy:
    """Risk-adjusted cross-chain allocation for one token."""
    token: str
    budget: float
    risk_level: str
    max_position: float
    primary: str
    allocation: Dict[str, AllocationEntry]
    execution_order: Tuple[str, ...]
    exit_plan: ExitPlan

    def to_dict(self) -> Dict[str, Any]:
        return {
            'token': self.token,
            'budget': self.budget,
            'riskLevel': self.risk_level,
            'maxPosition': self.max_position,
            'strategy': {
                'primary': self.primary,
                'allocation': {chain: entry.to_dict() for chain, entry in self.allocation.items()},
                'executionOrder': list(self.execution_order),
                'exitStrategy': self.exit_plan.to_dict(),
            },
        }


@dataclass(frozen=True)
class ExecutionStep:
    chain: str
    amount: str
    wrapped_symbol: str
    estimated_gas: str
    expected_slippage: str
    venue: str
    priority: int
    action: str = 'buy'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'chain': self.chain,
            'action': self.action,
            'amount': self.amount,
            'symbol': self.wrapped_symbol,
            'estimatedGas': self.estimated_gas,
            'expectedSlippage': self.expected_slippage,
            'dex': self.venue,
            'priority': self.priority,
        }


@dataclass(frozen=True)
class TransactionPayloadStub:
    chain: str
    kind: str
    payload: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {'chain': self.chain, 'type': self.kind, 'payload': self.payload}


@dataclass
class ExecutionPlan:
    """Ordered trade steps plus unsigned payload stubs for a strategy."""
    trade_id: str
    strategy: str
    token: str
    trades: List[ExecutionStep] = field(default_factory=list)
    transaction_payloads: List[TransactionPayloadStub] = field(default_factory=list)
    timing: Dict[str, str] = field(default_factory=dict)
    monitoring: Dict[str, Any] = field(default_factory=dict)
    status: str = 'ready_for_execution'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tradeId': self.trade_id,
            'strategy': self.strategy,
            'token': self.token,
            'status': self.status,
            'trades': [step.to_dict() for step in self.trades],
            'timing': dict(self.timing),
            'monitoring': self.monitoring,
        }
