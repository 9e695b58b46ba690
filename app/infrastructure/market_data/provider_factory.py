"""
Market data provider factory (config-driven).
"""

from __future__ import annotations

import logging
from typing import Optional

from app.config import settings
from app.infrastructure.market_data.types import MarketDataProvider
from app.infrastructure.market_data.yahoo_chart_provider import YahooChartProvider
from app.infrastructure.market_data.yfinance_provider import YFinanceProvider

logger = logging.getLogger(__name__)

_provider: Optional[MarketDataProvider] = None


def build_provider(name: str, timeout_seconds: float = 10.0) -> MarketDataProvider:
    name = (name or "").strip().lower()
    if name in ("yahoo_chart", "yahoo-chart", "chart"):
        return YahooChartProvider(timeout_seconds=timeout_seconds)
    if name not in ("", "yfinance"):
        raise ValueError(f"Unknown market data provider: {name}")
    return YFinanceProvider(timeout_seconds=timeout_seconds)


def get_market_data_provider() -> MarketDataProvider:
    """Process-wide provider selected by MARKET_DATA_PROVIDER"""
    global _provider
    if _provider is None:
        _provider = build_provider(settings.MARKET_DATA_PROVIDER, settings.QUOTE_TIMEOUT_SECONDS)
        logger.info(f"Market data provider: {type(_provider).__name__}")
    return _provider


async def close_market_data_provider() -> None:
    global _provider
    if _provider is not None:
        await _provider.aclose()
        _provider = None
