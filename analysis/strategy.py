"""Risk-adjusted allocation of a momentum position across chains."""
from __future__ import annotations

from typing import Dict, Iterable, Mapping

from analysis import catalog
from analysis.catalog import StrategyTemplate
from analysis.models import AllocationEntry, MomentumStrategy
from constants import DEFAULT_RISK_LEVEL
from errors import ClientInputError

ESTIMATED_RETURNS: Mapping[str, str] = {
    'conservative': '8-12%',
    'moderate': '12-18%',
    'aggressive': '18-25%',
}
TIMELINE = 'Entry: 15-30 minutes, Full cycle: 12-24 hours'
STRATEGY_RISKS = (
    'Cross-chain bridge delays',
    'Momentum reversal',
    'Liquidity gaps',
    'Gas fee spikes',
)


class StrategyBuilder:
    def __init__(
        self,
        templates: Mapping[str, StrategyTemplate] = catalog.STRATEGY_TEMPLATES,
        risk_multipliers: Mapping[str, float] = catalog.RISK_MULTIPLIERS,
    ):
        self.templates = templates
        self.risk_multipliers = risk_multipliers

    def resolve_risk_level(self, risk_level: str) -> str:
        """Unknown risk levels are sized, and reported, as the medium tier."""
        if risk_level in self.risk_multipliers:
            return risk_level
        return DEFAULT_RISK_LEVEL

    def build(
        self,
        token: str,
        budget: float,
        risk_level: str,
        chains: Iterable[str],
    ) -> MomentumStrategy:
        token = token.upper()
        template = self.templates.get(token)
        if template is None:
            raise ClientInputError(f"Strategy for {token} not available")
        if budget is None or budget <= 0:
            raise ClientInputError("Budget must be a positive number")

        risk_level = self.resolve_risk_level(risk_level)
        max_position = budget * self.risk_multipliers[risk_level]
        requested = set(chains)

        # Percentages stay as templated; a subset of chains is not rescaled to 100.
        allocation: Dict[str, AllocationEntry] = {}
        for slot in template.allocation:
            if slot.chain not in requested:
                continue
            allocation[slot.chain] = AllocationEntry(
                percentage=slot.percentage,
                amount=max_position * slot.percentage / 100,
                wrapped_symbol=slot.wrapped_symbol,
                rationale=slot.rationale,
            )

        execution_order = sorted(allocation, key=lambda chain: allocation[chain].percentage, reverse=True)

        return MomentumStrategy(
            token=token,
            budget=budget,
            risk_level=risk_level,
            max_position=max_position,
            primary=template.primary,
            allocation=allocation,
            execution_order=tuple(execution_order),
            exit_plan=template.exit_plan,
        )
