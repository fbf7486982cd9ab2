import pytest

from analysis.analyzer import TechnicalAnalyzer
from analysis.models import TimeframeObservation, TokenMarketData


def _market_data(**overrides):
    payload = dict(
        symbol='BTC',
        current_price=64000.0,
        market_cap=1.2e12,
        volume_24h=3e10,
        circulating_supply=19_700_000.0,
        change_1h=0.8,
        change_24h=4.5,
        change_7d=-2.0,
        price_history=tuple(60000 + i * 10 for i in range(30)),
    )
    payload.update(overrides)
    return TokenMarketData(**payload)


@pytest.fixture
def analyzer():
    return TechnicalAnalyzer()


def test_only_timeframes_with_data_are_reported(analyzer):
    analysis = analyzer.analyze(_market_data(change_1h=None), ['1h', '4h', '24h'])
    assert list(analysis.timeframes) == ['24h']
    assert analysis.timeframes['24h'].trend == 'bullish'
    assert analysis.timeframes['24h'].volume == 3e10


def test_empty_timeframes_score_zero(analyzer):
    analysis = analyzer.analyze(_market_data(), [])
    assert analysis.momentum_score == 0
    assert analysis.status == 'neutral'
    assert analysis.recommendation == 'hold'
    assert analysis.risk_level == 'low'


def test_aggregate_score_is_mean_of_contributions(analyzer):
    # 1h: min(8, 50) + min(150, 25) = 33; 24h: min(45, 50) + 25 = 70
    analysis = analyzer.analyze(_market_data(), ['1h', '24h'])
    assert analysis.momentum_score == pytest.approx(51.5)
    assert analysis.status == 'strong'
    assert analysis.recommendation == 'buy'
    assert analysis.risk_level == 'high'


def test_price_term_is_capped(analyzer):
    obs = TimeframeObservation('24h', percent_change=-30.0, volume=0.0, trend='very_bearish')
    assert analyzer.timeframe_contribution(obs) == 50


@pytest.mark.parametrize(
    'score, status, recommendation',
    [
        (61, 'very_strong', 'aggressive_buy'),
        (60, 'strong', 'buy'),
        (40.5, 'strong', 'buy'),
        (21, 'building', 'cautious_buy'),
        (20, 'neutral', 'hold'),
        (-20, 'neutral', 'hold'),
        (-21, 'fading', 'sell'),
    ],
)
def test_status_ladder(score, status, recommendation):
    assert TechnicalAnalyzer.classify_status(score) == (status, recommendation)


@pytest.mark.parametrize('score, risk', [(51, 'high'), (50, 'medium'), (31, 'medium'), (30, 'low')])
def test_risk_ladder(score, risk):
    assert TechnicalAnalyzer.classify_risk(score) == risk


def test_oscillator_bounds_and_short_history(analyzer):
    short = analyzer.analyze(_market_data(price_history=(1.0, 2.0, 3.0)), ['24h'])
    assert short.technicals.oscillator == 50
    rising = analyzer.analyze(_market_data(), ['24h'])
    assert rising.technicals.oscillator == 100
    choppy = tuple(100 + ((-1) ** i) * (i % 5) for i in range(40))
    mixed = analyzer.analyze(_market_data(price_history=choppy), ['24h'])
    assert 0 <= mixed.technicals.oscillator <= 100


@pytest.mark.parametrize(
    'volume, market_cap, expected',
    [
        (60, 100, 'exploding'),
        (30, 100, 'increasing'),
        (10, 100, 'normal'),
        (5, 100, 'decreasing'),
        (5, 0, 'unknown'),
    ],
)
def test_volume_profile(volume, market_cap, expected):
    assert TechnicalAnalyzer.volume_profile(volume, market_cap) == expected


@pytest.mark.parametrize(
    'change, volume, expected',
    [
        (6, 2e9, 'very_positive'),
        (6, 6e8, 'positive'),
        (0, 2e8, 'neutral'),
        (-6, 1e6, 'negative'),
        (-3, 2e8, 'neutral'),
        (None, 0, 'neutral'),
    ],
)
def test_cross_chain_flow(change, volume, expected):
    assert TechnicalAnalyzer.cross_chain_flow(change, volume) == expected


def test_sentiment_is_clamped():
    assert TechnicalAnalyzer.sentiment(0, 0, 0) == 0.5
    assert TechnicalAnalyzer.sentiment(10, 50, 100) == pytest.approx(0.5 + 0.03 + 0.1)
    assert TechnicalAnalyzer.sentiment(500, 1e12, 1) == 1.0
    assert TechnicalAnalyzer.sentiment(-500, 0, 0) == 0.0


def test_analysis_is_repeatable(analyzer):
    data = _market_data()
    first = analyzer.analyze(data, ['24h']).to_dict()
    second = analyzer.analyze(data, ['24h']).to_dict()
    assert first == second


def test_to_dict_shape(analyzer):
    body = analyzer.analyze(_market_data(), ['1h', '24h', '7d']).to_dict()
    assert set(body) == {
        'token', 'momentumScore', 'status', 'recommendation', 'timeframes', 'technicals', 'riskLevel', 'marketData',
    }
    assert body['marketData']['circulatingSupply'] == 19_700_000.0
    assert set(body['technicals']) == {'rsi', 'volumeProfile', 'crossChainFlow', 'socialSentiment'}


def test_market_data_from_coingecko_coin():
    block = {
        'current_price': {'usd': 3000},
        'market_cap': {'usd': 3.6e11},
        'total_volume': {'usd': 1.5e10},
        'circulating_supply': 120_000_000,
        'price_change_percentage_1h_in_currency': {'usd': 0.2},
        'price_change_percentage_24h_in_currency': {'usd': -1.1},
        'price_change_percentage_7d_in_currency': {},
        'sparkline_7d': {'price': [1, 2, 3]},
    }
    data = TokenMarketData.from_coingecko_coin('eth', block)
    assert data.symbol == 'ETH'
    assert data.change_24h == -1.1
    assert data.change_7d is None
    assert data.change_for('4h') is None
    assert data.price_history == (1, 2, 3)
