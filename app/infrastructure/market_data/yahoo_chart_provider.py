"""
Yahoo Chart Market Data Provider
Direct HTTP quotes from the v8 chart endpoint (no API key)
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional
from urllib.parse import quote as url_quote

import httpx

from app.infrastructure.market_data.types import MarketDataError, RawQuote

logger = logging.getLogger(__name__)

CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _to_decimal(value) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        return Decimal(str(value))
    except ArithmeticError:
        return None


def parse_chart_payload(symbol: str, payload: dict) -> RawQuote:
    """
    Extract a quote from a chart response body

    Raises:
        MarketDataError: Payload has no result or no usable price
    """
    results = ((payload or {}).get("chart") or {}).get("result") or []
    if not results:
        raise MarketDataError(f"No chart result for {symbol}")

    meta = results[0].get("meta") or {}
    price = _to_decimal(meta.get("regularMarketPrice"))
    if price is None or price <= 0:
        raise MarketDataError(f"No price in chart result for {symbol}")

    previous_close = _to_decimal(meta.get("chartPreviousClose")) or _to_decimal(meta.get("previousClose"))

    return RawQuote(
        symbol=meta.get("symbol") or symbol,
        price=price,
        previous_close=previous_close,
        name=meta.get("longName") or meta.get("shortName") or symbol,
        market_state=meta.get("marketState") or "UNKNOWN",
    )


class YahooChartProvider:
    def __init__(self, timeout_seconds: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout_seconds,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            )
        return self._client

    async def fetch_quote(self, symbol: str) -> RawQuote:
        url = CHART_URL.format(symbol=url_quote(symbol, safe=""))
        try:
            response = await self._get_client().get(url, params={"range": "1d", "interval": "1d"})
        except httpx.HTTPError as exc:
            raise MarketDataError(f"Chart request failed for {symbol}: {exc}") from exc

        if response.status_code != 200:
            logger.debug(f"Yahoo chart {response.status_code} for {symbol}: {response.text[:200]}")
            raise MarketDataError(f"Chart request for {symbol} returned {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise MarketDataError(f"Malformed chart response for {symbol}") from exc

        return parse_chart_payload(symbol, payload)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
