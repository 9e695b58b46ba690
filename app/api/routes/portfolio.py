"""
Portfolio API Routes
Create, look up and join portfolios; dashboard with live P&L
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.api.errors import http_error, internal_error
from app.domain.exceptions import RegistrySaturatedError, TrackerError
from app.domain.models import PositionStatus
from app.domain.schemas.portfolio import (
    DashboardResponse,
    PortfolioCreateRequest,
    PortfolioJoinRequest,
    PortfolioResponse,
    PortfolioTotalsResponse,
)
from app.domain.schemas.position import PositionResponse
from app.domain.schemas.watchlist import WatchlistItemResponse
from app.domain.services import pnl_engine
from app.infrastructure.db.database import get_db
from app.services.portfolio_service import PortfolioRegistry
from app.services.position_service import PositionLedger
from app.services.quote_service import QuoteGateway, get_quote_gateway
from app.services.watchlist_service import WatchlistStore
from app.utils.time import now_utc_naive, to_utc_iso_db

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=PortfolioResponse, status_code=status.HTTP_201_CREATED)
async def create_portfolio(request: PortfolioCreateRequest, db: AsyncSession = Depends(get_db)):
    """
    Create a portfolio with a fresh join code
    """
    try:
        registry = PortfolioRegistry(db)
        result = await registry.create(request.name, request.currency)
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Create portfolio error: {e}", exc_info=True)
        raise internal_error()

    if not result.created:
        raise http_error(RegistrySaturatedError("Could not allocate a portfolio code. Try again."))
    return PortfolioResponse.from_domain(result.portfolio)


@router.post("/join", response_model=PortfolioResponse)
async def join_portfolio(request: PortfolioJoinRequest, db: AsyncSession = Depends(get_db)):
    """
    Resolve a join code such as "PORT-7X3K" or "7x3k"
    """
    try:
        portfolio = await PortfolioRegistry(db).lookup_by_code(request.code)
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Join portfolio error: {e}", exc_info=True)
        raise internal_error()

    if portfolio is None:
        raise HTTPException(status_code=404, detail="Portfolio not found. Check your code.")
    return PortfolioResponse.from_domain(portfolio)


@router.get("/{portfolio_id}", response_model=PortfolioResponse)
async def get_portfolio(portfolio_id: str, db: AsyncSession = Depends(get_db)):
    try:
        portfolio = await PortfolioRegistry(db).lookup_by_id(portfolio_id)
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Get portfolio error: {e}", exc_info=True)
        raise internal_error()

    if portfolio is None:
        raise HTTPException(status_code=404, detail="Not found")
    return PortfolioResponse.from_domain(portfolio)


@router.get("/{portfolio_id}/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    portfolio_id: str,
    db: AsyncSession = Depends(get_db),
    gateway: QuoteGateway = Depends(get_quote_gateway),
):
    """
    Positions, watchlist and totals marked to live quotes

    Rows without a quote carry pnl=null; totals value them at cost basis.
    """
    try:
        portfolio = await PortfolioRegistry(db).lookup_by_id(portfolio_id)
        if portfolio is None:
            raise HTTPException(status_code=404, detail="Not found")

        ledger = PositionLedger(db)
        open_positions = await ledger.list(portfolio_id, PositionStatus.OPEN)
        closed_positions = await ledger.list(portfolio_id, PositionStatus.CLOSED)
        watchlist = await WatchlistStore(db).list(portfolio_id)
    except HTTPException:
        raise
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Dashboard load error: {e}", exc_info=True)
        raise internal_error()

    tickers = [p.ticker for p in open_positions] + [w.ticker for w in watchlist]
    batch = await gateway.get_quotes(tickers)
    quotes = batch.by_symbol()

    totals = pnl_engine.summarize(open_positions, closed_positions, quotes)

    return DashboardResponse(
        portfolio=PortfolioResponse.from_domain(portfolio),
        open_positions=[PositionResponse.with_pnl(p, quotes.get(p.ticker)) for p in open_positions],
        closed_positions=[PositionResponse.with_pnl(p, None) for p in closed_positions],
        watchlist=[WatchlistItemResponse.from_domain(w, quotes.get(w.ticker)) for w in watchlist],
        totals=PortfolioTotalsResponse(
            total_invested=float(totals.total_invested),
            total_current_value=float(totals.total_current_value),
            total_unrealized_pnl=float(totals.total_unrealized_pnl),
            total_unrealized_pnl_percent=float(totals.total_unrealized_pnl_percent),
            total_realized_pnl=float(totals.total_realized_pnl),
        ),
        prices_missing=batch.missing,
        last_updated=to_utc_iso_db(now_utc_naive()),
    )
