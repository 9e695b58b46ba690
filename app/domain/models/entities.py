"""
DOMAIN ENTITIES

Plain immutable records for portfolios, positions, watchlist items and quotes.
No database access. No market data fetching.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class PositionStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class Portfolio:
    id: str
    name: str
    code: str
    currency: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Position:
    """
    A recorded holding. sold_price and sold_date are set iff status is CLOSED.
    """
    id: str
    portfolio_id: str
    ticker: str
    shares: Decimal
    buy_price: Decimal
    status: PositionStatus = PositionStatus.OPEN
    company_name: Optional[str] = None
    buy_date: Optional[date] = None
    sell_target: Optional[Decimal] = None
    stop_loss: Optional[Decimal] = None
    notes: Optional[str] = None
    sold_price: Optional[Decimal] = None
    sold_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.status == PositionStatus.OPEN

    @property
    def cost_basis(self) -> Decimal:
        return self.buy_price * self.shares


@dataclass(frozen=True)
class WatchlistItem:
    id: str
    portfolio_id: str
    ticker: str
    company_name: Optional[str] = None
    target_buy: Optional[Decimal] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Quote:
    """
    Live quote for one symbol. Ephemeral; never persisted.
    """
    symbol: str
    price: Decimal
    change: Decimal
    change_percent: Decimal
    previous_close: Optional[Decimal]
    name: str
    market_state: str = "UNKNOWN"
