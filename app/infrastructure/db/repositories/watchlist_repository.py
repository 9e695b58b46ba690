"""
Watchlist Repository
CRUD operations for watched tickers scoped to a portfolio
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import WatchlistItem
from app.infrastructure.db.models import WatchlistItemModel


class WatchlistRepository:
    """Repository for WatchlistItem"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        portfolio_id: str,
        ticker: str,
        company_name: Optional[str] = None,
        target_buy: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> WatchlistItem:
        model = WatchlistItemModel(
            portfolio_id=portfolio_id,
            ticker=ticker,
            company_name=company_name,
            target_buy=target_buy,
            notes=notes,
        )
        self.session.add(model)
        await self.session.flush()
        return self._to_domain(model)

    async def list_for_portfolio(
        self,
        portfolio_id: str,
        search: Optional[str] = None,
    ) -> List[WatchlistItem]:
        """Watchlist of a portfolio, newest first"""
        stmt = select(WatchlistItemModel).where(WatchlistItemModel.portfolio_id == portfolio_id)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    WatchlistItemModel.ticker.ilike(pattern),
                    WatchlistItemModel.company_name.ilike(pattern),
                )
            )
        result = await self.session.execute(
            stmt.order_by(WatchlistItemModel.created_at.desc())
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def delete(self, item_id: str) -> bool:
        result = await self.session.execute(
            delete(WatchlistItemModel).where(WatchlistItemModel.id == item_id)
        )
        return result.rowcount > 0

    def _to_domain(self, model: WatchlistItemModel) -> WatchlistItem:
        return WatchlistItem(
            id=model.id,
            portfolio_id=model.portfolio_id,
            ticker=model.ticker,
            company_name=model.company_name,
            target_buy=Decimal(str(model.target_buy)) if model.target_buy is not None else None,
            notes=model.notes,
            created_at=model.created_at,
        )
