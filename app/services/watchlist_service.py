# app/services/watchlist_service.py

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import NotFoundError, ValidationError
from app.domain.models import WatchlistItem
from app.domain.schemas.watchlist import WatchlistItemCreateRequest
from app.infrastructure.db.repositories.portfolio_repository import PortfolioRepository
from app.infrastructure.db.repositories.watchlist_repository import WatchlistRepository
from app.services.position_service import clean_text, clean_ticker, require_positive

logger = logging.getLogger(__name__)


class WatchlistStore:
    """Watched tickers of one portfolio. No edits: delete and re-add instead."""

    def __init__(self, session: AsyncSession):
        self.repo = WatchlistRepository(session)
        self.portfolios = PortfolioRepository(session)

    async def add(self, request: WatchlistItemCreateRequest) -> WatchlistItem:
        if not (request.portfolio_id or "").strip():
            raise ValidationError("portfolio_id required")
        ticker = clean_ticker(request.ticker)
        target_buy = require_positive("target_buy", request.target_buy)

        if not await self.portfolios.exists(request.portfolio_id):
            raise NotFoundError("Portfolio not found")

        item = await self.repo.create(
            portfolio_id=request.portfolio_id,
            ticker=ticker,
            company_name=clean_text(request.company_name),
            target_buy=target_buy,
            notes=clean_text(request.notes),
        )
        logger.info("Added watchlist item | id=%s | ticker=%s", item.id, ticker)
        return item

    async def list(self, portfolio_id: str, search: Optional[str] = None) -> List[WatchlistItem]:
        if not (portfolio_id or "").strip():
            raise ValidationError("portfolio_id required")
        return await self.repo.list_for_portfolio(portfolio_id, clean_text(search))

    async def delete(self, item_id: str) -> None:
        if not await self.repo.delete(item_id):
            raise NotFoundError("Watchlist item not found")
        logger.info("Deleted watchlist item | id=%s", item_id)
