# scanner.py
import logging
from typing import Callable, Iterable, List, Mapping, Optional, Tuple

from analysis import catalog
from analysis.models import MomentumResult, ScanResult, TokenSnapshot
from constants import (
    DEFAULT_SCAN_THRESHOLD,
    DEFAULT_SCAN_TIMEFRAME,
    SCAN_RESULT_LIMIT,
    TIMEFRAME_CHANGE_FIELDS,
)
from momentum_indicator import calculate_momentum_score, determine_trend

logger = logging.getLogger(__name__)


class MomentumScanner:
    """Filters a market universe by price change and ranks it by momentum score."""

    def __init__(
        self,
        chain_lookup: Callable[[str], Tuple[str, ...]] = catalog.chain_representations,
        limit: int = SCAN_RESULT_LIMIT,
        scorer: Callable[[TokenSnapshot], float] = calculate_momentum_score,
    ):
        self.chain_lookup = chain_lookup
        self.limit = limit
        self.scorer = scorer

    @staticmethod
    def resolve_timeframe(timeframe: Optional[str]) -> str:
        """Unknown selectors scan the 24h change, like the provider default."""
        if timeframe in TIMEFRAME_CHANGE_FIELDS:
            return timeframe
        return DEFAULT_SCAN_TIMEFRAME

    def scan(
        self,
        snapshots: Iterable[TokenSnapshot],
        threshold: float = DEFAULT_SCAN_THRESHOLD,
        timeframe: str = DEFAULT_SCAN_TIMEFRAME,
    ) -> ScanResult:
        selected = self.resolve_timeframe(timeframe)
        matches: List[MomentumResult] = []

        for snapshot in snapshots:
            change = snapshot.change_for(selected)
            if change is None or abs(change) < threshold:
                continue
            matches.append(MomentumResult(
                snapshot=snapshot,
                score=self.scorer(snapshot),
                trend=determine_trend(change),
                chains=tuple(self.chain_lookup(snapshot.symbol)),
            ))

        # list.sort is stable, so equal scores keep provider order.
        matches.sort(key=lambda result: result.score, reverse=True)
        logger.info("Momentum scan (%s, >= %s%%): %d matches", selected, threshold, len(matches))

        return ScanResult(
            threshold=threshold,
            timeframe=timeframe,
            tokens=tuple(matches[:self.limit]),
            total_found=len(matches),
        )


def snapshots_from_markets(rows: Iterable[Mapping]) -> List[TokenSnapshot]:
    """Converts raw /coins/markets rows, skipping entries without a symbol."""
    return [TokenSnapshot.from_coingecko_market(row) for row in rows if row.get('symbol')]
