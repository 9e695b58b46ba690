# app/services/quote_service.py

"""
SERVICE — QUOTE GATEWAY

Best-effort live quotes for a set of tickers.

• Symbols are normalized and de-duplicated before any network call
• Each symbol is fetched independently; a failed symbol is just missing
• A failing batch still yields an empty, well-formed result
• Successful quotes are cached for the polling interval
• Simultaneous polls for one symbol wait on the same in-flight fetch
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from app.config import settings
from app.domain.models import Quote
from app.infrastructure.market_data.provider_factory import (
    close_market_data_provider,
    get_market_data_provider,
)
from app.infrastructure.market_data.types import MarketDataProvider, RawQuote

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class QuoteResult:
    """Outcome of one symbol's fetch: a quote, or the reason it failed"""
    symbol: str
    quote: Optional[Quote] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.quote is not None


@dataclass
class QuoteBatch:
    quotes: List[Quote] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)

    def by_symbol(self) -> Dict[str, Quote]:
        return {q.symbol: q for q in self.quotes}


def normalize_symbols(symbols: Iterable[str]) -> List[str]:
    """Trim, uppercase, drop blanks and duplicates; first occurrence wins."""
    seen: Dict[str, None] = {}
    for raw in symbols or []:
        symbol = (raw or "").strip().upper()
        if symbol and symbol not in seen:
            seen[symbol] = None
    return list(seen)


def build_quote(symbol: str, raw: RawQuote) -> Quote:
    """Derive change figures from a provider quote"""
    price = raw.price
    previous_close = raw.previous_close
    change = price - previous_close if previous_close else ZERO
    change_percent = (
        (change / previous_close * Decimal("100")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        if previous_close else ZERO
    )
    return Quote(
        # Keyed by the requested symbol so rows can join on their ticker
        symbol=symbol,
        price=price,
        change=change,
        change_percent=change_percent,
        previous_close=previous_close,
        name=raw.name or symbol,
        market_state=raw.market_state or "UNKNOWN",
    )


class QuoteGateway:
    def __init__(
        self,
        provider: MarketDataProvider,
        cache_ttl_seconds: Optional[int] = None,
    ):
        self.provider = provider
        self.cache_ttl_seconds = (
            settings.QUOTE_CACHE_TTL_SECONDS if cache_ttl_seconds is None else cache_ttl_seconds
        )
        self._cache: Dict[str, tuple[float, Quote]] = {}
        self._inflight: Dict[str, asyncio.Task] = {}

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    def _cache_get(self, symbol: str) -> Optional[Quote]:
        cached = self._cache.get(symbol)
        if not cached:
            return None
        ts, quote = cached
        if time.time() - ts > self.cache_ttl_seconds:
            self._cache.pop(symbol, None)
            return None
        return quote

    def _cache_set(self, symbol: str, quote: Quote) -> None:
        if self.cache_ttl_seconds > 0:
            self._cache[symbol] = (time.time(), quote)

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _fetch_one(self, symbol: str) -> QuoteResult:
        cached = self._cache_get(symbol)
        if cached is not None:
            return QuoteResult(symbol, quote=cached)

        # Concurrent misses for one symbol share a single provider call
        task = self._inflight.get(symbol)
        if task is None:
            task = asyncio.ensure_future(self._load(symbol))
            self._inflight[symbol] = task
        return await asyncio.shield(task)

    async def _load(self, symbol: str) -> QuoteResult:
        try:
            raw = await self.provider.fetch_quote(symbol)
            quote = build_quote(symbol, raw)
        except Exception as exc:
            logger.warning(f"Quote unavailable for {symbol}: {exc}")
            return QuoteResult(symbol, error=str(exc))
        finally:
            self._inflight.pop(symbol, None)

        self._cache_set(symbol, quote)
        return QuoteResult(symbol, quote=quote)

    # ------------------------------------------------------------------
    # BATCH
    # ------------------------------------------------------------------

    async def get_quotes(self, symbols: Iterable[str]) -> QuoteBatch:
        """
        Fetch quotes for many symbols concurrently

        Args:
            symbols: Tickers in any case, duplicates allowed

        Returns:
            QuoteBatch with successes in request order and failed symbols in missing
        """
        unique = normalize_symbols(symbols)
        if not unique:
            return QuoteBatch()

        try:
            results = await asyncio.gather(*(self._fetch_one(s) for s in unique))
        except Exception as exc:
            logger.error(f"Quote batch failed: {exc}")
            return QuoteBatch(quotes=[], missing=unique)

        batch = QuoteBatch()
        for result in results:
            if result.ok:
                batch.quotes.append(result.quote)
            else:
                batch.missing.append(result.symbol)

        logger.debug(f"Quotes fetched | ok={len(batch.quotes)} | missing={batch.missing}")
        return batch


_gateway: Optional[QuoteGateway] = None


def get_quote_gateway() -> QuoteGateway:
    """Process-wide gateway so the cache survives across requests"""
    global _gateway
    if _gateway is None:
        _gateway = QuoteGateway(get_market_data_provider())
    return _gateway


async def close_quote_gateway() -> None:
    global _gateway
    _gateway = None
    await close_market_data_provider()
