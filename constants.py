#!/usr/bin/env python3
from typing import Dict, Tuple

# --- ANSI Color Codes ---
C_GREEN = '\033[92m'
C_RED = '\033[91m'
C_YELLOW = '\033[93m'
C_BLUE = '\033[94m'
C_RESET = '\033[0m'

# --- API Configuration ---
COINGECKO_API_BASE_URL = 'https://api.coingecko.com/api/v3'
BINANCE_API_BASE_URL = 'https://api.binance.com/api/v3'
COINGECKO_MARKETS_PAGE_SIZE = 20
DATA_SOURCE_COINGECKO = 'CoinGecko API (Live)'
DATA_SOURCE_COINGECKO_BINANCE = 'CoinGecko API + Binance API (Live)'

# --- Environment Variable Names ---
TELEGRAM_BOT_TOKEN_ENV_VAR = 'TELEGRAM_BOT_TOKEN'
COINGECKO_API_KEY_ENV_VAR = 'COINGECKO_API_KEY'

# --- Request Defaults ---
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_SCAN_THRESHOLD = 5.0
DEFAULT_SCAN_TIMEFRAME = '24h'
DEFAULT_TOKEN = 'BTC'
DEFAULT_ANALYSIS_TIMEFRAMES: Tuple[str, ...] = ('1h', '4h', '24h')
DEFAULT_PRICE_CHAINS: Tuple[str, ...] = ('ethereum', 'bsc', 'polygon', 'solana')
DEFAULT_BUDGET = 2000.0
DEFAULT_RISK_LEVEL = 'medium'
DEFAULT_PLAN_CHAINS: Tuple[str, ...] = ('ethereum', 'bsc')
DEFAULT_PLAN_AMOUNTS: Tuple[str, ...] = ('1000', '500')

# --- Scanner Limits ---
SCAN_RESULT_LIMIT = 10

# CoinGecko /coins/markets field per scan timeframe selector.
TIMEFRAME_CHANGE_FIELDS: Dict[str, str] = {
    '1h': 'price_change_percentage_1h_in_currency',
    '24h': 'price_change_percentage_24h_in_currency',
    '7d': 'price_change_percentage_7d_in_currency',
}

# --- Arbitrage Thresholds ---
MIN_PROFITABLE_SPREAD_PCT = 1.0
MIN_SPREAD_AFTER_FEES = '0.5%'
MAX_VOLUME_IMPACT = 0.002
MAX_PRICE_NOISE = 0.002

# --- Oscillator ---
RSI_PERIOD = 14
RSI_NEUTRAL = 50.0
