#!/usr/bin/env python3
import asyncio
import os
from typing import Any, Dict, List, Optional

import aiohttp
from constants import (
    COINGECKO_API_BASE_URL,
    COINGECKO_API_KEY_ENV_VAR,
    COINGECKO_MARKETS_PAGE_SIZE,
    C_RED,
    C_RESET,
    DEFAULT_REQUEST_TIMEOUT,
)
from errors import UpstreamUnavailableError


def log_error(message: str) -> None:
    """Centralized error logging."""
    print(f"{C_RED}{message}{C_RESET}")


async def api_get(
    url: str,
    session: aiohttp.ClientSession,
    params: Optional[Dict] = None,
    headers: Optional[Dict] = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> Any:
    """Makes a single async GET request. Failures are not retried.

    Every failure, including an undecodable body, raises ``UpstreamUnavailableError``.
    """
    try:
        async with session.get(
            url,
            params=params,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            response.raise_for_status()
            return await response.json()
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        log_error(f"API request to {url} failed: {e}")
        raise UpstreamUnavailableError(f"Market data request failed: {e}") from e


class CoinGeckoClient:
    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        self.session = session
        self.api_key = api_key
        self.timeout = timeout
        self.headers = {'Accept': 'application/json'}
        if self.api_key:
            self.headers['x-cg-demo-api-key'] = self.api_key

    async def _get(self, path: str, params: Optional[Dict] = None) -> Any:
        url = f"{COINGECKO_API_BASE_URL}{path}"
        return await api_get(url, self.session, params=params, headers=self.headers, timeout=self.timeout)

    async def get_markets(self, per_page: int = COINGECKO_MARKETS_PAGE_SIZE) -> List[Dict]:
        """Top tokens by market cap with 1h/24h/7d price changes."""
        params = {
            'vs_currency': 'usd',
            'order': 'market_cap_desc',
            'per_page': str(per_page),
            'page': '1',
            'sparkline': 'false',
            'price_change_percentage': '1h,24h,7d',
        }
        data = await self._get('/coins/markets', params=params)
        if not isinstance(data, list):
            raise UpstreamUnavailableError("Unexpected /coins/markets response from CoinGecko")
        return data

    async def get_coin_by_id(self, coin_id: str) -> Dict:
        """Full coin record including market data and the 7-day sparkline."""
        params = {
            'localization': 'false', 'tickers': 'false', 'market_data': 'true',
            'community_data': 'false', 'developer_data': 'false', 'sparkline': 'true'
        }
        data = await self._get(f"/coins/{coin_id}", params=params)
        if not isinstance(data, dict):
            raise UpstreamUnavailableError(f"Unexpected /coins/{coin_id} response from CoinGecko")
        return data

    async def get_simple_price(self, coin_id: str) -> Optional[Dict]:
        """USD price, 24h volume and 24h change of a coin, or None if CoinGecko has no entry."""
        params = {
            'ids': coin_id,
            'vs_currencies': 'usd',
            'include_24hr_change': 'true',
            'include_24hr_vol': 'true',
        }
        data = await self._get('/simple/price', params=params)
        if not isinstance(data, dict):
            raise UpstreamUnavailableError("Unexpected /simple/price response from CoinGecko")
        return data.get(coin_id)


async def main():
    try:
        async with aiohttp.ClientSession() as session:
            api_key = os.environ.get(COINGECKO_API_KEY_ENV_VAR)
            client = CoinGeckoClient(session, api_key=api_key)

            print("--- Testing get_markets ---")
            markets = await client.get_markets()
            for coin in markets[:5]:
                print(f"- {coin['name']} ({coin['symbol'].upper()}): {coin.get('price_change_percentage_24h_in_currency')}")

            print("\n--- Testing get_simple_price ---")
            btc = await client.get_simple_price("bitcoin")
            if btc:
                print(f"Current BTC price: ${btc['usd']:,.2f}")
    except UpstreamUnavailableError as e:
        log_error(f"CoinGecko unavailable: {e}")

if __name__ == "__main__":
    print("--- Executing CoinGecko Client Examples ---")
    asyncio.run(main())
