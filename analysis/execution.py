"""Sequencing of a momentum strategy into ordered trades and unsigned payload stubs."""
from __future__ import annotations

import copy
import logging
import time
from typing import Any, Callable, Dict, Optional, Sequence

from web3 import Web3

from analysis import catalog
from analysis.catalog import ExecutionVenue
from analysis.models import ExecutionPlan, ExecutionStep, TransactionPayloadStub
from errors import ClientInputError

DEFAULT_TRADE_AMOUNT = '1000'

EXECUTION_TIMING: Dict[str, str] = {
    'estimatedDuration': '15-30 minutes',
    'optimalWindow': 'Next 2 hours',
    'marketCondition': 'favorable',
}

MONITORING_GUIDANCE: Dict[str, Any] = {
    'priceTargets': {
        'entry': 'Current market +/- 0.5%',
        'profit': '+15%',
        'stopLoss': '-8%',
    },
    'alerts': [
        'Price movement > 2%',
        'Volume spike > 50%',
        'Cross-chain arbitrage > 3%',
    ],
}

INSTRUCTIONS = (
    '1. Review the execution plan and transaction payloads',
    '2. Execute trades in the specified priority order',
    '3. Monitor price movements and momentum indicators',
    '4. Be ready to exit when profit targets are hit or momentum fades',
    '5. Use stop-losses to protect against sudden reversals',
)

WARNINGS_AND_RISKS = (
    'High volatility - momentum can reverse quickly',
    'Cross-chain execution takes time - prices may move',
    'Gas fees can be high during volatile periods',
    'Not all chains may execute simultaneously',
)

NEXT_STEPS = 'Use generate-transaction or generate-evm-tx tools to execute each payload'

logger = logging.getLogger(__name__)


def _text_word(value: str) -> str:
    """Left-aligned 32-byte word holding the UTF-8 bytes of ``value``."""
    encoded = Web3.to_hex(text=value)[2:]
    return encoded[:64].ljust(64, '0')


def build_swap_data(token: str, amount: str) -> str:
    """Placeholder calldata: swap selector followed by the token and amount words."""
    return catalog.SWAP_SELECTOR + _text_word(token.lower()) + _text_word(str(amount))


class ExecutionPlanner:
    def __init__(
        self,
        venue_lookup: Callable[[str], ExecutionVenue] = catalog.execution_venue,
        symbol_lookup: Callable[[str, str], str] = catalog.execution_symbol,
        clock: Callable[[], float] = time.time,
    ):
        self.venue_lookup = venue_lookup
        self.symbol_lookup = symbol_lookup
        self.clock = clock

    def plan(
        self,
        strategy: Optional[str],
        token: str,
        chains: Sequence[str],
        amounts: Sequence[str],
    ) -> ExecutionPlan:
        if not strategy or not strategy.strip():
            raise ClientInputError("Strategy parameter is required")

        # The reference is not checked against anything StrategyBuilder produced.
        plan = ExecutionPlan(
            trade_id=f"momentum_{int(self.clock() * 1000)}",
            strategy=strategy,
            token=token.upper(),
            timing=dict(EXECUTION_TIMING),
            monitoring=copy.deepcopy(MONITORING_GUIDANCE),
        )

        for index, chain in enumerate(chains):
            amount = self._amount_at(amounts, index)
            venue = self.venue_lookup(chain)
            symbol = self.symbol_lookup(token, chain)
            plan.trades.append(ExecutionStep(
                chain=chain,
                amount=amount,
                wrapped_symbol=symbol,
                estimated_gas=venue.estimated_gas,
                expected_slippage=venue.expected_slippage,
                venue=venue.venue,
                priority=index + 1,
            ))
            plan.transaction_payloads.append(self.build_payload(chain, token, amount, symbol, venue))

        logger.info("Planned %d trades for %s (strategy=%s)", len(plan.trades), plan.token, strategy)
        return plan

    @staticmethod
    def _amount_at(amounts: Sequence[str], index: int) -> str:
        if index < len(amounts) and amounts[index]:
            return str(amounts[index])
        return DEFAULT_TRADE_AMOUNT

    def build_payload(
        self,
        chain: str,
        token: str,
        amount: str,
        symbol: str,
        venue: ExecutionVenue,
    ) -> TransactionPayloadStub:
        if chain == catalog.NEAR_CHAIN:
            return TransactionPayloadStub(
                chain=chain,
                kind='near_transaction',
                payload={
                    'receiverId': catalog.NEAR_DEX_CONTRACT,
                    'actions': [
                        {
                            'type': 'FunctionCall',
                            'params': {
                                'methodName': 'swap',
                                'args': {
                                    'token_in': 'near',
                                    'token_out': symbol,
                                    'amount_in': amount,
                                },
                                'gas': catalog.NEAR_SWAP_GAS,
                                'deposit': amount,
                            },
                        }
                    ],
                },
            )

        router = venue.router_address or catalog.ZERO_ADDRESS
        return TransactionPayloadStub(
            chain=chain,
            kind='evm_transaction',
            payload={
                'to': Web3.to_checksum_address(router),
                'value': amount,
                'data': build_swap_data(token, amount),
                'chainId': venue.chain_id or catalog.DEFAULT_EVM_CHAIN_ID,
            },
        )


def plan_response_body(plan: ExecutionPlan) -> Dict[str, Any]:
    return {
        'executionPlan': plan.to_dict(),
        'transactionPayloads': [stub.to_dict() for stub in plan.transaction_payloads],
        'instructions': list(INSTRUCTIONS),
        'warningsAndRisks': list(WARNINGS_AND_RISKS),
        'nextSteps': NEXT_STEPS,
    }
