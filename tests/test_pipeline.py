from unittest.mock import AsyncMock, MagicMock

import pytest

from analysis.pricing import CrossChainPriceSynthesizer, ZeroNoise
from constants import DATA_SOURCE_COINGECKO, DATA_SOURCE_COINGECKO_BINANCE
from errors import UpstreamUnavailableError
from pipeline import MomentumPipeline

FIXED_TIME = '2026-01-01T00:00:00+00:00'


def _market_row(symbol, change_24h, volume=1e9, market_cap=1e10):
    return {
        'symbol': symbol.lower(),
        'name': symbol.title(),
        'current_price': 10.0,
        'total_volume': volume,
        'market_cap': market_cap,
        'price_change_percentage_1h_in_currency': 0.1,
        'price_change_percentage_24h_in_currency': change_24h,
        'price_change_percentage_7d_in_currency': 1.0,
    }


def _coin_record():
    return {
        'id': 'bitcoin',
        'market_data': {
            'current_price': {'usd': 64000},
            'market_cap': {'usd': 1.2e12},
            'total_volume': {'usd': 3e10},
            'circulating_supply': 19_700_000,
            'price_change_percentage_1h_in_currency': {'usd': 0.8},
            'price_change_percentage_24h_in_currency': {'usd': 4.5},
            'price_change_percentage_7d_in_currency': {'usd': -2.0},
            'sparkline_7d': {'price': [60000 + i for i in range(30)]},
        },
    }


@pytest.fixture
def coingecko():
    client = MagicMock()
    client.get_markets = AsyncMock(return_value=[])
    client.get_coin_by_id = AsyncMock(return_value=_coin_record())
    client.get_simple_price = AsyncMock(return_value={'usd': 100.0, 'usd_24h_vol': 0.0, 'usd_24h_change': 1.2})
    return client


@pytest.fixture
def binance():
    client = MagicMock()
    client.get_24h_ticker = AsyncMock(return_value={'volume': 1000.0, 'priceChange': 1.5})
    return client


@pytest.fixture
def pipeline(coingecko, binance):
    return MomentumPipeline(
        coingecko,
        binance_client=binance,
        pricer=CrossChainPriceSynthesizer(rng=ZeroNoise()),
        clock=lambda: FIXED_TIME,
    )


@pytest.mark.asyncio
async def test_scan_reports_detected_tokens(pipeline, coingecko):
    rows = [_market_row(f"t{i}", 1.0) for i in range(17)]
    rows += [_market_row('btc', 5.0), _market_row('eth', -9.0), _market_row('sol', 12.0)]
    coingecko.get_markets.return_value = rows

    result = await pipeline.scan(threshold=5, timeframe='24h')

    assert result.status == 200
    assert result.ok
    body = result.body
    assert body['threshold'] == '5%'
    assert body['momentumDetected'] is True
    assert [token['token'] for token in body['tokens']] == ['SOL', 'ETH', 'BTC']
    assert '3' in body['summary']
    assert body['dataSource'] == DATA_SOURCE_COINGECKO
    assert body['timestamp'] == FIXED_TIME


@pytest.mark.asyncio
async def test_upstream_failure_maps_to_503(pipeline, coingecko):
    coingecko.get_markets.side_effect = UpstreamUnavailableError('timeout')

    result = await pipeline.scan()

    assert result.status == 503
    assert result.body['error'] == 'Failed to fetch live market data. Please try again later.'
    assert result.body['fallback'] == 'API temporarily unavailable'
    assert 'timestamp' not in result.body


@pytest.mark.asyncio
async def test_unexpected_failure_maps_to_500(pipeline, coingecko):
    coingecko.get_markets.side_effect = RuntimeError('kaput')

    result = await pipeline.scan()

    assert result.status == 500
    assert result.body == {'error': 'Failed to detect momentum', 'details': 'kaput'}


@pytest.mark.asyncio
async def test_analyze_unsupported_token_does_not_call_upstream(pipeline, coingecko):
    result = await pipeline.analyze('DOGE')

    assert result.status == 400
    assert result.body['error'] == 'Token DOGE not supported'
    coingecko.get_coin_by_id.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_without_market_data(pipeline, coingecko):
    coingecko.get_coin_by_id.return_value = {'id': 'bitcoin'}
    result = await pipeline.analyze('BTC')
    assert result.status == 400


@pytest.mark.asyncio
async def test_analyze_is_repeatable(pipeline, coingecko):
    first = await pipeline.analyze('btc', ['1h', '4h', '24h'])
    second = await pipeline.analyze('btc', ['1h', '4h', '24h'])

    assert first.status == 200
    assert first.body == second.body
    assert first.body['token'] == 'BTC'
    assert list(first.body['timeframes']) == ['1h', '24h']
    coingecko.get_coin_by_id.assert_awaited_with('bitcoin')


@pytest.mark.asyncio
async def test_price_with_binance_data(pipeline, binance):
    result = await pipeline.price('BTC', ['ethereum', 'bsc', 'polygon'])

    assert result.status == 200
    body = result.body
    assert set(body['chains']) == {'ethereum', 'bsc', 'polygon'}
    assert body['chains']['bsc']['price'] == pytest.approx(99.8)
    assert body['arbitrage']['buyChain'] == 'bsc'
    assert body['arbitrage']['sellChain'] == 'polygon'
    assert body['marketData']['binanceData'] == {'volume': 1000.0, 'priceChange': 1.5}
    assert body['dataSource'] == DATA_SOURCE_COINGECKO_BINANCE
    binance.get_24h_ticker.assert_awaited_once_with('BTCUSDT')


@pytest.mark.asyncio
async def test_price_without_binance_still_succeeds(pipeline, binance):
    binance.get_24h_ticker.return_value = None

    result = await pipeline.price('BTC', ['ethereum'])

    assert result.status == 200
    assert result.body['marketData']['binanceData'] is None


@pytest.mark.asyncio
async def test_price_with_no_supported_chain(pipeline):
    result = await pipeline.price('SOL', ['polygon'])
    assert result.status == 400
    assert result.body['error'] == 'No supported chains found for this token'


@pytest.mark.asyncio
async def test_price_missing_from_provider(pipeline, coingecko):
    coingecko.get_simple_price.return_value = None
    result = await pipeline.price('BTC', ['ethereum'])
    assert result.status == 400


@pytest.mark.asyncio
async def test_strategy_body(pipeline):
    result = await pipeline.build_strategy('BTC', 2000, 'low', ['ethereum', 'bsc'])

    assert result.status == 200
    body = result.body
    assert body['maxPosition'] == pytest.approx(600)
    assert set(body['strategy']['allocation']) == {'ethereum', 'bsc'}
    assert body['estimatedReturns']['moderate'] == '12-18%'
    assert len(body['risks']) == 4


@pytest.mark.asyncio
async def test_strategy_for_unknown_token(pipeline):
    result = await pipeline.build_strategy('DOGE', 1000, 'medium', ['ethereum'])
    assert result.status == 400
    assert result.body['error'] == 'Strategy for DOGE not available'


@pytest.mark.asyncio
async def test_plan_requires_strategy(pipeline):
    result = await pipeline.plan('', 'BTC', ['ethereum'], ['1000'])
    assert result.status == 400
    assert result.body['error'] == 'Strategy parameter is required'


@pytest.mark.asyncio
async def test_plan_body(pipeline):
    result = await pipeline.plan('momentum-btc', 'BTC', ['ethereum', 'near'], ['500'])

    assert result.status == 200
    plan = result.body['executionPlan']
    assert [trade['priority'] for trade in plan['trades']] == [1, 2]
    assert [trade['amount'] for trade in plan['trades']] == ['500', '1000']
    assert [stub['type'] for stub in result.body['transactionPayloads']] == ['evm_transaction', 'near_transaction']
    assert result.body['timestamp'] == FIXED_TIME


@pytest.mark.asyncio
async def test_strategy_reports_applied_risk_level(pipeline):
    result = await pipeline.build_strategy('ETH', 1000, 'yolo', ['ethereum'])

    assert result.status == 200
    assert result.body['riskLevel'] == 'medium'
    assert result.body['maxPosition'] == pytest.approx(600)
