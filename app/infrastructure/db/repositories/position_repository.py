"""
Position Repository
CRUD operations for stock positions scoped to a portfolio
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import Position, PositionStatus
from app.infrastructure.db.models import PositionModel, PositionStatusEnum

# Columns the generic edit path may touch; status and sold_* are excluded
EDITABLE_FIELDS = frozenset({
    "ticker",
    "company_name",
    "shares",
    "buy_price",
    "buy_date",
    "sell_target",
    "stop_loss",
    "notes",
})


class PositionRepository:
    """Repository for Position"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        portfolio_id: str,
        ticker: str,
        shares: Decimal,
        buy_price: Decimal,
        company_name: Optional[str] = None,
        buy_date: Optional[date] = None,
        sell_target: Optional[Decimal] = None,
        stop_loss: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> Position:
        """
        Create new open position

        Returns:
            The created Position
        """
        model = PositionModel(
            portfolio_id=portfolio_id,
            ticker=ticker,
            company_name=company_name,
            shares=shares,
            buy_price=buy_price,
            buy_date=buy_date,
            sell_target=sell_target,
            stop_loss=stop_loss,
            notes=notes,
            status=PositionStatusEnum.OPEN.value,
        )
        self.session.add(model)
        await self.session.flush()
        return self._to_domain(model)

    async def get(self, position_id: str) -> Optional[Position]:
        model = await self.session.get(PositionModel, position_id)
        return self._to_domain(model) if model else None

    async def list_for_portfolio(
        self,
        portfolio_id: str,
        status: PositionStatus = PositionStatus.OPEN,
        search: Optional[str] = None,
    ) -> List[Position]:
        """
        List positions of one status, newest first

        Args:
            portfolio_id: Owning portfolio
            status: open or closed
            search: Case-insensitive match on ticker or company name
        """
        stmt = select(PositionModel).where(
            PositionModel.portfolio_id == portfolio_id,
            PositionModel.status == status.value,
        )
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    PositionModel.ticker.ilike(pattern),
                    PositionModel.company_name.ilike(pattern),
                )
            )
        result = await self.session.execute(
            stmt.order_by(PositionModel.created_at.desc())
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def update_fields(self, position_id: str, changes: Dict[str, Any]) -> Optional[Position]:
        """
        Apply a partial update; keys outside EDITABLE_FIELDS are rejected.

        Returns:
            Updated Position, or None if it does not exist
        """
        illegal = set(changes) - EDITABLE_FIELDS
        if illegal:
            raise ValueError(f"Fields not editable: {', '.join(sorted(illegal))}")

        model = await self.session.get(PositionModel, position_id)
        if model is None:
            return None
        for field, value in changes.items():
            setattr(model, field, value)
        await self.session.flush()
        return self._to_domain(model)

    async def close(self, position_id: str, sold_price: Decimal, sold_date: date) -> Optional[Position]:
        """
        Mark an open position as sold in a single UPDATE

        Status, sold_price and sold_date change together or not at all.

        Returns:
            The closed Position, or None if no open position matched
        """
        result = await self.session.execute(
            update(PositionModel)
            .where(
                PositionModel.id == position_id,
                PositionModel.status == PositionStatusEnum.OPEN.value,
            )
            .values(
                status=PositionStatusEnum.CLOSED.value,
                sold_price=sold_price,
                sold_date=sold_date,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None

        model = await self.session.get(PositionModel, position_id, populate_existing=True)
        return self._to_domain(model)

    async def delete(self, position_id: str) -> bool:
        result = await self.session.execute(
            delete(PositionModel).where(PositionModel.id == position_id)
        )
        return result.rowcount > 0

    def _to_domain(self, model: PositionModel) -> Position:
        """Convert ORM model to domain entity"""
        return Position(
            id=model.id,
            portfolio_id=model.portfolio_id,
            ticker=model.ticker,
            company_name=model.company_name,
            shares=Decimal(str(model.shares)),
            buy_price=Decimal(str(model.buy_price)),
            buy_date=model.buy_date,
            sell_target=_to_decimal(model.sell_target),
            stop_loss=_to_decimal(model.stop_loss),
            notes=model.notes,
            status=PositionStatus(model.status),
            sold_price=_to_decimal(model.sold_price),
            sold_date=model.sold_date,
            created_at=model.created_at,
        )


def _to_decimal(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None
