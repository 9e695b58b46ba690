"""
Market data provider protocol for type hints.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol


class MarketDataError(Exception):
    """A provider could not produce a quote for a symbol."""


@dataclass(frozen=True)
class RawQuote:
    """What a provider knows about one symbol right now."""
    symbol: str
    price: Decimal
    previous_close: Optional[Decimal]
    name: str
    market_state: str = "UNKNOWN"


class MarketDataProvider(Protocol):
    async def fetch_quote(self, symbol: str) -> RawQuote:
        """Return the current quote or raise."""
        ...

    async def aclose(self) -> None:
        ...
