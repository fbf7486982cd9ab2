#!/usr/bin/env python3
import logging
from typing import Dict, Optional

import aiohttp
from constants import BINANCE_API_BASE_URL, DEFAULT_REQUEST_TIMEOUT
from errors import UpstreamUnavailableError
from services.coingecko_client import api_get

logger = logging.getLogger(__name__)


class BinanceClient:
    """Secondary liquidity feed; a missing ticker never fails the caller."""

    def __init__(self, session: aiohttp.ClientSession, timeout: float = DEFAULT_REQUEST_TIMEOUT):
        self.session = session
        self.timeout = timeout

    async def get_24h_ticker(self, symbol: str) -> Optional[Dict[str, float]]:
        """Returns {'volume', 'priceChange'} for a USDT pair, or None when unavailable."""
        url = f"{BINANCE_API_BASE_URL}/ticker/24hr"
        try:
            data = await api_get(url, self.session, params={'symbol': symbol}, timeout=self.timeout)
        except UpstreamUnavailableError:
            logger.info("Binance data not available for %s", symbol)
            return None

        try:
            return {
                'volume': float(data['volume']),
                'priceChange': float(data['priceChangePercent']),
            }
        except (KeyError, TypeError, ValueError):
            logger.info("Unexpected Binance ticker payload for %s", symbol)
            return None
