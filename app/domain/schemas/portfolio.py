from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from app.domain.models import Portfolio
from app.domain.schemas.position import PositionResponse
from app.domain.schemas.watchlist import WatchlistItemResponse


class PortfolioCreateRequest(BaseModel):
    name: str
    currency: Optional[str] = None


class PortfolioJoinRequest(BaseModel):
    code: str


class PortfolioResponse(BaseModel):
    id: str
    name: str
    code: str
    currency: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, portfolio: Portfolio) -> "PortfolioResponse":
        return cls(
            id=portfolio.id,
            name=portfolio.name,
            code=portfolio.code,
            currency=portfolio.currency,
            created_at=portfolio.created_at,
        )


class PortfolioTotalsResponse(BaseModel):
    total_invested: float
    total_current_value: float
    total_unrealized_pnl: float
    total_unrealized_pnl_percent: float
    total_realized_pnl: float


class DashboardResponse(BaseModel):
    portfolio: PortfolioResponse
    open_positions: List[PositionResponse]
    closed_positions: List[PositionResponse]
    watchlist: List[WatchlistItemResponse]
    totals: PortfolioTotalsResponse
    prices_missing: List[str]
    last_updated: str
