"""
YFinance Market Data Provider
Async-safe Yahoo Finance quotes via thread offloading
"""

import asyncio
import logging
import math
from decimal import Decimal
from typing import Optional

import yfinance as yf

from app.infrastructure.market_data.types import MarketDataError, RawQuote

logger = logging.getLogger(__name__)


def _to_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return Decimal(str(number))


class YFinanceProvider:
    """
    Yahoo Finance data provider (yfinance)
    Blocking yfinance calls run in a worker thread
    """

    def __init__(self, timeout_seconds: float = 10.0):
        self.timeout_seconds = timeout_seconds

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    def _read_quote(self, symbol: str) -> RawQuote:
        ticker = yf.Ticker(symbol)
        fast = ticker.fast_info

        price = _to_decimal(fast.get("lastPrice"))
        if price is None or price <= 0:
            raise MarketDataError(f"No price data for {symbol}")

        previous_close = _to_decimal(fast.get("previousClose")) or _to_decimal(
            fast.get("regularMarketPreviousClose")
        )

        name = symbol
        try:
            info = ticker.get_info()
            name = info.get("longName") or info.get("shortName") or symbol
            market_state = info.get("marketState") or "UNKNOWN"
        except Exception as exc:
            # Names are cosmetic; keep the price even if the info call fails
            logger.debug(f"yfinance info lookup failed for {symbol}: {exc}")
            market_state = "UNKNOWN"

        return RawQuote(
            symbol=symbol,
            price=price,
            previous_close=previous_close,
            name=name,
            market_state=market_state,
        )

    # ------------------------------------------------------------------
    # CURRENT QUOTES
    # ------------------------------------------------------------------

    async def fetch_quote(self, symbol: str) -> RawQuote:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._read_quote, symbol),
                timeout=self.timeout_seconds,
            )
        except MarketDataError:
            raise
        except Exception as exc:
            raise MarketDataError(f"yfinance quote failed for {symbol}: {exc}") from exc

    async def aclose(self) -> None:
        return None
