from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.domain.models import Position, Quote
from app.domain.services import pnl_engine


def _f(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


class PositionCreateRequest(BaseModel):
    portfolio_id: str
    ticker: str
    shares: Decimal
    buy_price: Decimal
    company_name: Optional[str] = None
    buy_date: Optional[date] = None
    sell_target: Optional[Decimal] = None
    stop_loss: Optional[Decimal] = None
    notes: Optional[str] = None


class PositionUpdateRequest(BaseModel):
    """Partial edit; omitted or null fields keep their stored value"""
    model_config = ConfigDict(extra="forbid")

    ticker: Optional[str] = None
    company_name: Optional[str] = None
    shares: Optional[Decimal] = None
    buy_price: Optional[Decimal] = None
    buy_date: Optional[date] = None
    sell_target: Optional[Decimal] = None
    stop_loss: Optional[Decimal] = None
    notes: Optional[str] = None


class PositionSellRequest(BaseModel):
    sold_price: Decimal
    sold_date: Optional[date] = None


class PnLResponse(BaseModel):
    value: float
    cost_basis: float
    pnl: float
    pnl_percent: float


class PositionResponse(BaseModel):
    id: str
    portfolio_id: str
    ticker: str
    company_name: Optional[str] = None
    shares: float
    buy_price: float
    buy_date: Optional[date] = None
    sell_target: Optional[float] = None
    stop_loss: Optional[float] = None
    notes: Optional[str] = None
    status: str
    sold_price: Optional[float] = None
    sold_date: Optional[date] = None
    created_at: Optional[datetime] = None

    # Derived; present only on dashboard rows
    current_price: Optional[float] = None
    pnl: Optional[PnLResponse] = None
    at_target: bool = False
    at_stop: bool = False

    @classmethod
    def from_domain(cls, position: Position) -> "PositionResponse":
        return cls(
            id=position.id,
            portfolio_id=position.portfolio_id,
            ticker=position.ticker,
            company_name=position.company_name,
            shares=float(position.shares),
            buy_price=float(position.buy_price),
            buy_date=position.buy_date,
            sell_target=_f(position.sell_target),
            stop_loss=_f(position.stop_loss),
            notes=position.notes,
            status=position.status.value,
            sold_price=_f(position.sold_price),
            sold_date=position.sold_date,
            created_at=position.created_at,
        )

    @classmethod
    def with_pnl(cls, position: Position, quote: Optional[Quote]) -> "PositionResponse":
        """Row for display: unrealized for open, realized for closed"""
        row = cls.from_domain(position)
        if position.is_open:
            calc = pnl_engine.unrealized(position, quote)
            if calc:
                row.current_price = float(calc.price)
                row.pnl = PnLResponse(
                    value=float(calc.current_value),
                    cost_basis=float(calc.cost_basis),
                    pnl=float(calc.pnl),
                    pnl_percent=float(calc.pnl_percent),
                )
            row.at_target = pnl_engine.is_at_target(position, quote)
            row.at_stop = pnl_engine.is_at_stop(position, quote)
        else:
            calc = pnl_engine.realized(position)
            if calc:
                row.pnl = PnLResponse(
                    value=float(calc.proceeds),
                    cost_basis=float(calc.cost_basis),
                    pnl=float(calc.pnl),
                    pnl_percent=float(calc.pnl_percent),
                )
        return row
