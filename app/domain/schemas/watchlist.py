from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from app.domain.models import Quote, WatchlistItem
from app.domain.services import pnl_engine


class WatchlistItemCreateRequest(BaseModel):
    portfolio_id: str
    ticker: str
    company_name: Optional[str] = None
    target_buy: Optional[Decimal] = None
    notes: Optional[str] = None


class WatchlistItemResponse(BaseModel):
    id: str
    portfolio_id: str
    ticker: str
    company_name: Optional[str] = None
    target_buy: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    current_price: Optional[float] = None
    in_buy_zone: bool = False

    @classmethod
    def from_domain(cls, item: WatchlistItem, quote: Optional[Quote] = None) -> "WatchlistItemResponse":
        return cls(
            id=item.id,
            portfolio_id=item.portfolio_id,
            ticker=item.ticker,
            company_name=item.company_name,
            target_buy=float(item.target_buy) if item.target_buy is not None else None,
            notes=item.notes,
            created_at=item.created_at,
            current_price=float(quote.price) if quote is not None else None,
            in_buy_zone=pnl_engine.is_in_buy_zone(item, quote),
        )
