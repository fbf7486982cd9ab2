import random

import pytest

from analysis.models import ChainPriceQuote
from analysis.pricing import CrossChainPriceSynthesizer, ZeroNoise
from errors import ClientInputError


class FixedNoise:
    def __init__(self, value):
        self.value = value

    def uniform(self, a, b):
        assert a == -b
        return self.value


@pytest.fixture
def exact():
    return CrossChainPriceSynthesizer(rng=ZeroNoise())


def test_exact_prices_with_zero_noise(exact):
    prices = exact.synthesize('BTC', 100.0, 0.0, ['ethereum', 'bsc', 'polygon', 'solana'])
    assert prices.quotes['ethereum'].price == pytest.approx(100.0)
    assert prices.quotes['bsc'].price == pytest.approx(99.8)
    assert prices.quotes['polygon'].price == pytest.approx(100.1)
    assert prices.quotes['solana'].price == pytest.approx(99.9)
    assert prices.quotes['bsc'].wrapped_symbol == 'BTCB'
    assert prices.quotes['solana'].venue == 'Jupiter'


def test_volume_impact_is_bounded(exact):
    assert exact.volume_impact(1e6) == pytest.approx(0.0001)
    assert exact.volume_impact(1.5e7) == pytest.approx(0.0015)
    assert exact.volume_impact(1e12) == pytest.approx(0.002)
    prices = exact.synthesize('ETH', 1000.0, 1e12, ['ethereum'])
    assert prices.quotes['ethereum'].price == pytest.approx(1002.0)


def test_spread_and_direction(exact):
    prices = exact.synthesize('BTC', 100.0, 0.0, ['ethereum', 'bsc', 'polygon'])
    arb = prices.arbitrage
    assert arb.buy_chain == 'bsc'
    assert arb.sell_chain == 'polygon'
    assert arb.spread_percent == pytest.approx((100.1 - 99.8) / 99.8 * 100)
    assert arb.profitable is False


def test_unmapped_chains_are_dropped(exact):
    prices = exact.synthesize('SOL', 150.0, 0.0, ['ethereum', 'polygon', 'fantom'])
    assert list(prices.quotes) == ['ethereum']


def test_no_supported_chain_is_client_error(exact):
    with pytest.raises(ClientInputError):
        exact.synthesize('SOL', 150.0, 0.0, ['polygon', 'arbitrum'])
    with pytest.raises(ClientInputError):
        exact.synthesize('MATIC', 0.7, 0.0, ['ethereum', 'polygon'])


def test_noise_is_applied_within_bounds():
    synth = CrossChainPriceSynthesizer(rng=FixedNoise(0.002))
    prices = synth.synthesize('BTC', 100.0, 0.0, ['ethereum'])
    assert prices.quotes['ethereum'].price == pytest.approx(100.2)


def test_random_quotes_keep_invariants():
    synth = CrossChainPriceSynthesizer(rng=random.Random(7))
    for _ in range(50):
        prices = synth.synthesize('ETH', 2500.0, 5e9, ['ethereum', 'bsc', 'polygon', 'solana', 'avalanche'])
        values = [quote.price for quote in prices.quotes.values()]
        assert len(values) == 5
        assert max(values) >= min(values)
        for quote in prices.quotes.values():
            assert 2500.0 * 0.994 <= quote.price <= 2500.0 * 1.006
        expected = (max(values) - min(values)) / min(values) * 100
        assert prices.arbitrage.spread_percent == pytest.approx(expected)
        assert prices.arbitrage.profitable is (prices.arbitrage.spread_percent > 1.0)


def test_seeded_sources_are_reproducible():
    first = CrossChainPriceSynthesizer(rng=random.Random(42)).synthesize('BTC', 100.0, 0.0, ['ethereum', 'bsc'])
    second = CrossChainPriceSynthesizer(rng=random.Random(42)).synthesize('BTC', 100.0, 0.0, ['ethereum', 'bsc'])
    assert first == second


def test_profitable_above_one_percent():
    quotes = {
        'bsc': ChainPriceQuote('bsc', 'BTCB', 100.0, 0.3, 'PancakeSwap'),
        'polygon': ChainPriceQuote('polygon', 'wBTC', 101.5, 0.4, 'QuickSwap'),
    }
    arb = CrossChainPriceSynthesizer.find_arbitrage(quotes)
    assert arb.spread_percent == pytest.approx(1.5)
    assert arb.profitable is True
    assert arb.to_dict()['opportunity'] == '1.50%'
    assert arb.to_dict()['minSpread'] == '0.5%'


def test_exactly_one_percent_is_not_profitable():
    quotes = {
        'a': ChainPriceQuote('a', 'X', 100.0, 0.1, 'A'),
        'b': ChainPriceQuote('b', 'X', 101.0, 0.1, 'B'),
    }
    arb = CrossChainPriceSynthesizer.find_arbitrage(quotes)
    assert arb.spread_percent == pytest.approx(1.0)
    assert arb.profitable is False


def test_token_symbol_is_case_insensitive(exact):
    prices = exact.synthesize('btc', 100.0, 0.0, ['ethereum'])
    assert prices.token == 'BTC'
    assert prices.quotes['ethereum'].wrapped_symbol == 'wBTC'
