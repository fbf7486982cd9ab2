# momentum_indicator.py
from typing import Optional, Sequence

from analysis.models import TokenSnapshot
from constants import RSI_NEUTRAL, RSI_PERIOD


def calculate_rsi(prices: Sequence[float], period: int = RSI_PERIOD) -> float:
    """Calculates an RSI-style oscillator from the most recent ``period`` price deltas.

    Fewer than ``period`` prices yield the neutral midpoint. A window without
    any losses saturates at 100.
    """

    if period <= 0:
        raise ValueError("RSI period must be positive")

    if not prices or len(prices) < period:
        return RSI_NEUTRAL

    changes = [prices[i] - prices[i - 1] for i in range(1, len(prices))]
    recent = changes[-period:]

    avg_gain = sum(max(change, 0.0) for change in recent) / period
    avg_loss = sum(max(-change, 0.0) for change in recent) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    rsi = 100 - (100 / (1 + rs))
    return float(max(0, min(100, round(rsi))))


def calculate_momentum_score(snapshot: TokenSnapshot) -> float:
    """
    Calculates a momentum score for a token from its market snapshot.

    Args:
        snapshot (TokenSnapshot): Price changes, volume and market cap of the token.

    Returns:
        A non-negative score rounded to one decimal. The 1h change weighs more
        than the 24h change; volume and market cap contributions are capped at
        20 and 10 points.
    """
    change_24h = snapshot.reported_change_24h or 0.0
    change_1h = snapshot.change_1h or 0.0
    volume = snapshot.volume_24h or 0.0
    market_cap = snapshot.market_cap or 0.0

    score = 0.0
    score += abs(change_24h) * 2
    score += abs(change_1h) * 3
    score += min((volume / 1_000_000_000) * 10, 20)
    score += min((market_cap / 1_000_000_000) * 2, 10)

    return round(score, 1)


def determine_trend(change_percent: Optional[float]) -> str:
    """Buckets a signed percent change into one of seven trend labels."""
    if change_percent is None:
        return "neutral"

    if change_percent > 15:
        return "very_bullish"
    if change_percent > 8:
        return "strong_bullish"
    if change_percent > 3:
        return "bullish"
    if change_percent > -3:
        return "neutral"
    if change_percent > -8:
        return "bearish"
    if change_percent > -15:
        return "strong_bearish"
    return "very_bearish"
