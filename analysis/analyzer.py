#!/usr/bin/env python3
from typing import Dict, Iterable, Tuple

from analysis.models import (
    MomentumAnalysis,
    TechnicalProfile,
    TimeframeObservation,
    TokenMarketData,
)
from constants import RSI_PERIOD
from momentum_indicator import calculate_rsi, determine_trend

SUPPORTED_TIMEFRAMES = ('1h', '4h', '24h', '7d')

# (score floor, status, recommendation), checked top-down.
STATUS_LADDER: Tuple[Tuple[float, str, str], ...] = (
    (60, 'very_strong', 'aggressive_buy'),
    (40, 'strong', 'buy'),
    (20, 'building', 'cautious_buy'),
)
FADING_CEILING = -20


class TechnicalAnalyzer:
    def __init__(self, rsi_period: int = RSI_PERIOD):
        self.rsi_period = rsi_period

    def analyze(self, market_data: TokenMarketData, timeframes: Iterable[str]) -> MomentumAnalysis:
        """Builds the multi-timeframe momentum analysis for one token."""
        observations = self.build_observations(market_data, timeframes)
        score = self.aggregate_score(observations.values())
        status, recommendation = self.classify_status(score)

        return MomentumAnalysis(
            token=market_data.symbol,
            momentum_score=score,
            status=status,
            recommendation=recommendation,
            risk_level=self.classify_risk(score),
            timeframes=observations,
            technicals=self.technical_profile(market_data),
            market_data=market_data,
        )

    def build_observations(
        self,
        market_data: TokenMarketData,
        timeframes: Iterable[str],
    ) -> Dict[str, TimeframeObservation]:
        observations: Dict[str, TimeframeObservation] = {}
        requested = set(timeframes)
        # Output follows the canonical timeframe order, not the request order.
        for timeframe in SUPPORTED_TIMEFRAMES:
            if timeframe not in requested:
                continue
            change = market_data.change_for(timeframe)
            if change is None:
                continue
            observations[timeframe] = TimeframeObservation(
                timeframe=timeframe,
                percent_change=change,
                volume=market_data.volume_24h,
                trend=determine_trend(change),
            )
        return observations

    def technical_profile(self, market_data: TokenMarketData) -> TechnicalProfile:
        return TechnicalProfile(
            oscillator=calculate_rsi(market_data.price_history, self.rsi_period),
            volume_profile=self.volume_profile(market_data.volume_24h, market_data.market_cap),
            cross_chain_flow=self.cross_chain_flow(market_data.change_24h, market_data.volume_24h),
            sentiment=self.sentiment(market_data.change_24h, market_data.volume_24h, market_data.market_cap),
        )

    @staticmethod
    def volume_profile(volume: float, market_cap: float) -> str:
        if not market_cap:
            return 'unknown'

        ratio = volume / market_cap
        if ratio > 0.5:
            return 'exploding'
        if ratio > 0.2:
            return 'increasing'
        if ratio > 0.05:
            return 'normal'
        return 'decreasing'

    @staticmethod
    def cross_chain_flow(change_24h: float, volume: float) -> str:
        change_24h = change_24h or 0.0
        volume = volume or 0.0

        if change_24h > 5 and volume > 1_000_000_000:
            return 'very_positive'
        if change_24h > 2 and volume > 500_000_000:
            return 'positive'
        if change_24h > -2 and volume > 100_000_000:
            return 'neutral'
        if change_24h < -5:
            return 'negative'
        return 'neutral'

    @staticmethod
    def sentiment(change_24h: float, volume: float, market_cap: float) -> float:
        sentiment = 0.5
        sentiment += ((change_24h or 0.0) / 100) * 0.3
        if market_cap and market_cap > 0:
            sentiment += min(((volume or 0.0) / market_cap) * 0.2, 0.2)
        return max(0.0, min(1.0, sentiment))

    @staticmethod
    def timeframe_contribution(observation: TimeframeObservation) -> float:
        price_term = min(abs(observation.percent_change) * 10, 50)
        volume_term = min((observation.volume / 1_000_000_000) * 5, 25)
        return price_term + volume_term

    def aggregate_score(self, observations: Iterable[TimeframeObservation]) -> float:
        scores = [self.timeframe_contribution(obs) for obs in observations]
        if not scores:
            return 0.0
        return sum(scores) / len(scores)

    @staticmethod
    def classify_status(score: float) -> Tuple[str, str]:
        for floor, status, recommendation in STATUS_LADDER:
            if score > floor:
                return status, recommendation
        if score < FADING_CEILING:
            return 'fading', 'sell'
        return 'neutral', 'hold'

    @staticmethod
    def classify_risk(score: float) -> str:
        if score > 50:
            return 'high'
        if score > 30:
            return 'medium'
        return 'low'
