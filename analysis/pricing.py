"""Per-chain price projection and arbitrage spread detection."""
from __future__ import annotations

import logging
import random
from typing import Callable, Dict, Iterable, Mapping, Optional, Protocol

from analysis import catalog
from analysis.catalog import ChainPriceProfile
from analysis.models import ArbitrageOpportunity, ChainPriceQuote, CrossChainPrices
from constants import (
    MAX_PRICE_NOISE,
    MAX_VOLUME_IMPACT,
    MIN_PROFITABLE_SPREAD_PCT,
    MIN_SPREAD_AFTER_FEES,
)
from errors import ClientInputError

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...


class ZeroNoise:
    """Randomness source that always returns the midpoint, making pricing exact."""

    def uniform(self, a: float, b: float) -> float:
        return (a + b) / 2


class CrossChainPriceSynthesizer:
    def __init__(
        self,
        rng: Optional[RandomSource] = None,
        profiles: Mapping[str, ChainPriceProfile] = catalog.CHAIN_PRICE_PROFILES,
        symbol_lookup: Callable[[str, str], Optional[str]] = catalog.pricing_symbol,
        max_noise: float = MAX_PRICE_NOISE,
    ):
        self.rng = rng if rng is not None else random.Random()
        self.profiles = profiles
        self.symbol_lookup = symbol_lookup
        self.max_noise = max_noise

    @staticmethod
    def volume_impact(volume_24h: float) -> float:
        return min((volume_24h or 0.0) / 10_000_000_000, MAX_VOLUME_IMPACT)

    def quote(self, token: str, chain: str, base_price: float, volume_24h: float) -> Optional[ChainPriceQuote]:
        """Projects the token price on one chain, or None when the chain does not carry it."""
        profile = self.profiles.get(chain)
        symbol = self.symbol_lookup(token, chain)
        if profile is None or symbol is None:
            return None

        noise = self.rng.uniform(-self.max_noise, self.max_noise)
        factor = profile.price_factor + self.volume_impact(volume_24h) + noise
        return ChainPriceQuote(
            chain=chain,
            wrapped_symbol=symbol,
            price=base_price * factor,
            slippage_percent=profile.slippage_percent,
            venue=profile.venue,
        )

    def synthesize(
        self,
        token: str,
        base_price: float,
        volume_24h: float,
        chains: Iterable[str],
    ) -> CrossChainPrices:
        token = token.upper()
        quotes: Dict[str, ChainPriceQuote] = {}
        for chain in chains:
            if chain in quotes:
                continue
            quote = self.quote(token, chain, base_price, volume_24h)
            if quote is None:
                logger.debug("No %s representation on %s; skipping", token, chain)
                continue
            quotes[chain] = quote

        if not quotes:
            raise ClientInputError("No supported chains found for this token")

        return CrossChainPrices(token=token, quotes=quotes, arbitrage=self.find_arbitrage(quotes))

    @staticmethod
    def find_arbitrage(quotes: Mapping[str, ChainPriceQuote]) -> ArbitrageOpportunity:
        """Spread between the cheapest and the most expensive quote, in percent."""
        if not quotes:
            raise ClientInputError("No supported chains found for this token")

        prices = [quote.price for quote in quotes.values()]
        min_price = min(prices)
        max_price = max(prices)
        if min_price <= 0:
            raise ClientInputError("Cannot compute a spread from non-positive prices")

        spread = (max_price - min_price) / min_price * 100
        buy_chain = next(chain for chain, quote in quotes.items() if quote.price == min_price)
        sell_chain = next(chain for chain, quote in quotes.items() if quote.price == max_price)

        return ArbitrageOpportunity(
            spread_percent=spread,
            buy_chain=buy_chain,
            sell_chain=sell_chain,
            profitable=spread > MIN_PROFITABLE_SPREAD_PCT,
            min_spread=MIN_SPREAD_AFTER_FEES,
        )
