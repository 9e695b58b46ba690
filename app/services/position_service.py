# app/services/position_service.py

"""
SERVICE — POSITION LEDGER

• Add / list / edit / sell / delete positions of one portfolio
• Edits are patches: omitted or null fields keep their stored value
• Selling is the only way to close a position or set sold_* fields
• Deletes are hard deletes
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import ConflictError, NotFoundError, ValidationError
from app.domain.models import Position, PositionStatus
from app.domain.schemas.position import PositionCreateRequest, PositionUpdateRequest
from app.infrastructure.db.repositories.portfolio_repository import PortfolioRepository
from app.infrastructure.db.repositories.position_repository import PositionRepository
from app.utils.time import today_utc

logger = logging.getLogger(__name__)


def clean_ticker(ticker: Optional[str]) -> str:
    symbol = (ticker or "").strip().upper()
    if not symbol:
        raise ValidationError("Ticker required")
    return symbol


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def require_positive(field: str, value: Optional[Decimal], required: bool = False) -> Optional[Decimal]:
    if value is None:
        if required:
            raise ValidationError(f"{field} required")
        return None
    if value <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return value


class PositionLedger:
    def __init__(self, session: AsyncSession):
        self.repo = PositionRepository(session)
        self.portfolios = PortfolioRepository(session)

    async def add(self, request: PositionCreateRequest) -> Position:
        if not (request.portfolio_id or "").strip():
            raise ValidationError("portfolio_id required")
        ticker = clean_ticker(request.ticker)
        shares = require_positive("shares", request.shares, required=True)
        buy_price = require_positive("buy_price", request.buy_price, required=True)

        if not await self.portfolios.exists(request.portfolio_id):
            raise NotFoundError("Portfolio not found")

        position = await self.repo.create(
            portfolio_id=request.portfolio_id,
            ticker=ticker,
            shares=shares,
            buy_price=buy_price,
            company_name=clean_text(request.company_name),
            buy_date=request.buy_date,
            sell_target=require_positive("sell_target", request.sell_target),
            stop_loss=require_positive("stop_loss", request.stop_loss),
            notes=clean_text(request.notes),
        )
        logger.info("Added position | id=%s | ticker=%s | portfolio=%s", position.id, ticker, position.portfolio_id)
        return position

    async def list(
        self,
        portfolio_id: str,
        status: PositionStatus = PositionStatus.OPEN,
        search: Optional[str] = None,
    ) -> List[Position]:
        if not (portfolio_id or "").strip():
            raise ValidationError("portfolio_id required")
        return await self.repo.list_for_portfolio(portfolio_id, status, clean_text(search))

    async def get(self, position_id: str) -> Position:
        position = await self.repo.get(position_id)
        if position is None:
            raise NotFoundError("Position not found")
        return position

    async def edit(self, position_id: str, request: PositionUpdateRequest) -> Position:
        """
        Patch a position

        Only fields the caller supplied with a non-null value change.
        """
        changes = {
            field: value
            for field, value in request.model_dump(exclude_unset=True).items()
            if value is not None
        }

        if "ticker" in changes:
            changes["ticker"] = clean_ticker(changes["ticker"])
        for field in ("shares", "buy_price", "sell_target", "stop_loss"):
            if field in changes:
                require_positive(field, changes[field])
        for field in ("company_name", "notes"):
            if field in changes:
                changes[field] = clean_text(changes[field])
                if changes[field] is None:
                    del changes[field]

        if not changes:
            return await self.get(position_id)

        position = await self.repo.update_fields(position_id, changes)
        if position is None:
            raise NotFoundError("Position not found")
        logger.info("Edited position | id=%s | fields=%s", position_id, ",".join(sorted(changes)))
        return position

    async def sell(self, position_id: str, sold_price: Decimal, sold_date: Optional[date] = None) -> Position:
        """
        Close an open position at sold_price on sold_date (default today)

        Raises:
            NotFoundError: No such position
            ConflictError: Position is already closed
        """
        require_positive("sold_price", sold_price, required=True)
        when = sold_date or today_utc()

        position = await self.repo.close(position_id, sold_price, when)
        if position is None:
            existing = await self.repo.get(position_id)
            if existing is None:
                raise NotFoundError("Position not found")
            raise ConflictError("Position already closed")

        logger.info("Sold position | id=%s | price=%s | date=%s", position_id, sold_price, when)
        return position

    async def delete(self, position_id: str) -> None:
        if not await self.repo.delete(position_id):
            raise NotFoundError("Position not found")
        logger.info("Deleted position | id=%s", position_id)
