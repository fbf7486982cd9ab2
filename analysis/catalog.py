"""Closed lookup tables for supported tokens and chains.

Every table is a read-only mapping. Lookups go through the helper functions
below, which apply the documented fallback for combinations that are not
listed:

* chain representations for the scanner fall back to ``FALLBACK_CHAIN_REPRESENTATIONS``;
* pricing has no fallback, an unlisted (token, chain) pair is simply not quoted;
* the execution planner falls back to the bare token symbol and to
  ``FALLBACK_EXECUTION_VENUE`` for unknown chains.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from analysis.models import ExitPlan

# --- Tokens ---
COINGECKO_IDS: Mapping[str, str] = MappingProxyType({
    'BTC': 'bitcoin',
    'ETH': 'ethereum',
    'SOL': 'solana',
    'MATIC': 'matic-network',
    'AVAX': 'avalanche-2',
    'BNB': 'binancecoin',
    'ADA': 'cardano',
    'DOT': 'polkadot',
    'LINK': 'chainlink',
    'UNI': 'uniswap',
})

BINANCE_SYMBOLS: Mapping[str, str] = MappingProxyType({
    symbol: f"{symbol}USDT" for symbol in COINGECKO_IDS
})

CHAIN_REPRESENTATIONS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    'BTC': ('Bitcoin', 'Ethereum (wBTC)', 'BSC (BTCB)', 'Solana (Portal BTC)'),
    'ETH': ('Ethereum', 'BSC (ETH)', 'Polygon (ETH)', 'Arbitrum (ETH)', 'Optimism (ETH)'),
    'SOL': ('Solana', 'Ethereum (Wrapped SOL)', 'BSC (SOL)'),
    'MATIC': ('Polygon', 'Ethereum (MATIC)', 'BSC (MATIC)'),
    'AVAX': ('Avalanche', 'Ethereum (AVAX)', 'BSC (AVAX)'),
    'BNB': ('BSC', 'Ethereum (BNB)'),
    'ADA': ('Cardano', 'Ethereum (ADA)', 'BSC (ADA)'),
    'DOT': ('Polkadot', 'Ethereum (DOT)', 'BSC (DOT)'),
})
FALLBACK_CHAIN_REPRESENTATIONS: Tuple[str, ...] = ('Ethereum', 'BSC')


# --- Pricing ---
@dataclass(frozen=True)
class ChainPriceProfile:
    """Typical fee/liquidity premium or discount of a chain relative to the reference price."""
    price_factor: float
    slippage_percent: float
    venue: str


CHAIN_PRICE_PROFILES: Mapping[str, ChainPriceProfile] = MappingProxyType({
    'ethereum': ChainPriceProfile(1.0, 0.1, 'Uniswap V3'),
    'bsc': ChainPriceProfile(0.998, 0.3, 'PancakeSwap'),
    'polygon': ChainPriceProfile(1.001, 0.4, 'QuickSwap'),
    'solana': ChainPriceProfile(0.999, 0.2, 'Jupiter'),
    'arbitrum': ChainPriceProfile(1.0005, 0.15, 'Uniswap V3'),
    'optimism': ChainPriceProfile(1.0002, 0.18, 'Uniswap V3'),
    'avalanche': ChainPriceProfile(0.997, 0.25, 'Trader Joe'),
})

PRICING_WRAPPED_SYMBOLS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    'BTC': MappingProxyType({
        'ethereum': 'wBTC',
        'bsc': 'BTCB',
        'polygon': 'wBTC',
        'solana': 'Portal BTC',
        'arbitrum': 'wBTC',
        'optimism': 'wBTC',
        'avalanche': 'BTC.b',
    }),
    'ETH': MappingProxyType({
        'ethereum': 'ETH',
        'bsc': 'ETH',
        'polygon': 'ETH',
        'solana': 'Wrapped ETH',
        'arbitrum': 'ETH',
        'optimism': 'ETH',
        'avalanche': 'WETH.e',
    }),
    'SOL': MappingProxyType({
        'solana': 'SOL',
        'ethereum': 'SOL',
        'bsc': 'SOL',
    }),
})


# --- Strategy templates ---
RISK_MULTIPLIERS: Mapping[str, float] = MappingProxyType({
    'low': 0.3,
    'medium': 0.6,
    'high': 0.9,
})


@dataclass(frozen=True)
class AllocationSlot:
    chain: str
    percentage: float
    wrapped_symbol: str
    rationale: str


@dataclass(frozen=True)
class StrategyTemplate:
    primary: str
    allocation: Tuple[AllocationSlot, ...]
    exit_plan: ExitPlan


STRATEGY_TEMPLATES: Mapping[str, StrategyTemplate] = MappingProxyType({
    'BTC': StrategyTemplate(
        primary='ethereum',
        allocation=(
            AllocationSlot('ethereum', 40, 'wBTC', 'Highest liquidity, lowest slippage'),
            AllocationSlot('bsc', 25, 'BTCB', 'Good liquidity, lower fees'),
            AllocationSlot('polygon', 20, 'wBTC', 'Low fees, decent liquidity'),
            AllocationSlot('solana', 15, 'Portal BTC', 'Fast execution, growing ecosystem'),
        ),
        exit_plan=ExitPlan(
            profit_target_percent=15,
            stop_loss_percent=8,
            time_limit='24h',
            partial_exit_schedule=(
                ('fifty_percent', 'at 8% profit'),
                ('thirty_percent', 'at 12% profit'),
                ('twenty_percent', 'let it ride to target'),
            ),
        ),
    ),
    'ETH': StrategyTemplate(
        primary='ethereum',
        allocation=(
            AllocationSlot('ethereum', 50, 'ETH', 'Native chain, maximum liquidity'),
            AllocationSlot('arbitrum', 25, 'ETH', 'L2 efficiency, high liquidity'),
            AllocationSlot('bsc', 15, 'ETH', 'Cross-chain exposure'),
            AllocationSlot('polygon', 10, 'ETH', 'Low fee option'),
        ),
        exit_plan=ExitPlan(
            profit_target_percent=12,
            stop_loss_percent=6,
            time_limit='18h',
            partial_exit_schedule=(
                ('forty_percent_a', 'at 6% profit'),
                ('forty_percent_b', 'at 10% profit'),
                ('twenty_percent', 'hold to target'),
            ),
        ),
    ),
    'SOL': StrategyTemplate(
        primary='solana',
        allocation=(
            AllocationSlot('solana', 60, 'SOL', 'Native chain, best price discovery'),
            AllocationSlot('ethereum', 25, 'SOL', 'Cross-chain arbitrage potential'),
            AllocationSlot('bsc', 15, 'SOL', 'Additional exposure, lower fees'),
        ),
        exit_plan=ExitPlan(
            profit_target_percent=20,
            stop_loss_percent=10,
            time_limit='12h',
            partial_exit_schedule=(
                ('thirty_percent', 'at 10% profit'),
                ('forty_percent', 'at 15% profit'),
                ('thirty_percent_hold', 'hold to target'),
            ),
        ),
    ),
})


# --- Execution ---
@dataclass(frozen=True)
class ExecutionVenue:
    estimated_gas: str
    expected_slippage: str
    venue: str
    router_address: Optional[str] = None
    chain_id: Optional[int] = None


ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'
DEFAULT_EVM_CHAIN_ID = 1
NEAR_CHAIN = 'near'
NEAR_DEX_CONTRACT = 'dex.near'
NEAR_SWAP_GAS = '100000000000000'
# Uniswap V3 exactInputSingle selector.
SWAP_SELECTOR = '0x414bf389'

EXECUTION_VENUES: Mapping[str, ExecutionVenue] = MappingProxyType({
    'ethereum': ExecutionVenue('0.015 ETH', '0.1%', 'Uniswap V3',
                               '0xE592427A0AEce92De3Edee1F18E0157C05861564', 1),
    'bsc': ExecutionVenue('0.003 BNB', '0.3%', 'PancakeSwap',
                          '0x10ED43C718714eb63d5aA57B78B54704E256024E', 56),
    'polygon': ExecutionVenue('0.01 MATIC', '0.4%', 'QuickSwap',
                              '0xa5E0829CaCEd8fFDD4De3c43696c57F7D7A678ff', 137),
    'arbitrum': ExecutionVenue('0.005 ETH', '0.2%', 'Uniswap V3',
                               '0xE592427A0AEce92De3Edee1F18E0157C05861564', 42161),
    'solana': ExecutionVenue('0.001 SOL', '0.2%', 'Jupiter'),
    'near': ExecutionVenue('0.01 NEAR', '0.5%', 'Ref Finance'),
})
FALLBACK_EXECUTION_VENUE = ExecutionVenue('0.01 ETH', '0.5%', 'Unknown DEX')

EXECUTION_WRAPPED_SYMBOLS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    'BTC': MappingProxyType({
        'ethereum': 'wBTC',
        'bsc': 'BTCB',
        'solana': 'Portal BTC',
        'polygon': 'wBTC',
        'near': 'nBTC',
    }),
    'ETH': MappingProxyType({
        'ethereum': 'ETH',
        'bsc': 'ETH',
        'solana': 'Wrapped ETH',
        'polygon': 'ETH',
        'arbitrum': 'ETH',
        'near': 'nETH',
    }),
    'SOL': MappingProxyType({
        'solana': 'SOL',
        'ethereum': 'SOL',
        'bsc': 'SOL',
        'near': 'nSOL',
    }),
})


def coingecko_id(symbol: str) -> Optional[str]:
    return COINGECKO_IDS.get(symbol.upper())


def binance_symbol(symbol: str) -> Optional[str]:
    return BINANCE_SYMBOLS.get(symbol.upper())


def chain_representations(symbol: str) -> Tuple[str, ...]:
    return CHAIN_REPRESENTATIONS.get(symbol.upper(), FALLBACK_CHAIN_REPRESENTATIONS)


def pricing_symbol(token: str, chain: str) -> Optional[str]:
    return PRICING_WRAPPED_SYMBOLS.get(token.upper(), {}).get(chain)


def execution_symbol(token: str, chain: str) -> str:
    return EXECUTION_WRAPPED_SYMBOLS.get(token.upper(), {}).get(chain, token)


def execution_venue(chain: str) -> ExecutionVenue:
    return EXECUTION_VENUES.get(chain, FALLBACK_EXECUTION_VENUE)
