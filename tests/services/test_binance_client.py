import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from analysis.pricing import CrossChainPriceSynthesizer, ZeroNoise
from errors import UpstreamUnavailableError
from pipeline import MomentumPipeline
from services.binance_client import BinanceClient


class BrokenBodyResponse:
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def raise_for_status(self):
        pass

    async def json(self):
        return json.loads('{"truncated": ')


class BrokenBodySession:
    def get(self, url, params=None, headers=None, timeout=None):
        return BrokenBodyResponse()


@pytest.mark.asyncio
async def test_ticker_is_parsed(monkeypatch):
    captured = {}

    async def fake_get(url, session, params=None, headers=None, timeout=None):
        captured['url'] = url
        captured['params'] = params
        return {'volume': '12345.6', 'priceChangePercent': '-2.5', 'lastPrice': '64000'}

    monkeypatch.setattr('services.binance_client.api_get', fake_get)

    ticker = await BinanceClient(session=None).get_24h_ticker('BTCUSDT')

    assert ticker == {'volume': 12345.6, 'priceChange': -2.5}
    assert captured['url'].endswith('/ticker/24hr')
    assert captured['params'] == {'symbol': 'BTCUSDT'}


@pytest.mark.asyncio
async def test_upstream_failure_returns_none(monkeypatch):
    async def fake_get(url, session, params=None, headers=None, timeout=None):
        raise UpstreamUnavailableError('boom')

    monkeypatch.setattr('services.binance_client.api_get', fake_get)

    assert await BinanceClient(session=None).get_24h_ticker('BTCUSDT') is None


@pytest.mark.asyncio
async def test_malformed_payload_returns_none(monkeypatch):
    async def fake_get(url, session, params=None, headers=None, timeout=None):
        return {'code': -1121, 'msg': 'Invalid symbol.'}

    monkeypatch.setattr('services.binance_client.api_get', fake_get)

    assert await BinanceClient(session=None).get_24h_ticker('XYZUSDT') is None


@pytest.mark.asyncio
async def test_undecodable_body_returns_none():
    assert await BinanceClient(BrokenBodySession()).get_24h_ticker('BTCUSDT') is None


@pytest.mark.asyncio
async def test_undecodable_body_does_not_fail_price():
    coingecko = MagicMock()
    coingecko.get_simple_price = AsyncMock(return_value={'usd': 100.0, 'usd_24h_vol': 0.0, 'usd_24h_change': 0.5})
    pipeline = MomentumPipeline(
        coingecko,
        binance_client=BinanceClient(BrokenBodySession()),
        pricer=CrossChainPriceSynthesizer(rng=ZeroNoise()),
    )

    result = await pipeline.price('BTC', ['ethereum'])

    assert result.status == 200
    assert result.body['marketData']['binanceData'] is None
