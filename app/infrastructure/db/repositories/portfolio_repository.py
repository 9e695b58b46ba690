"""
Portfolio Repository
Create and look up portfolios; reports join-code collisions as a result value
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import Portfolio
from app.infrastructure.db.models import PortfolioModel

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_code_unique_violation(exc: IntegrityError) -> bool:
    """
    True when the integrity error is the unique constraint on portfolio code.

    PostgreSQL drivers expose the SQLSTATE; SQLite only has the message text.
    """
    orig = getattr(exc, "orig", None)
    message = str(orig if orig is not None else exc).lower()
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        is_unique = sqlstate == UNIQUE_VIOLATION_SQLSTATE
    else:
        is_unique = "unique" in message or "duplicate" in message
    return is_unique and "code" in message


class PortfolioRepository:
    """Repository for Portfolio"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def insert(self, name: str, code: str, currency: str) -> Optional[Portfolio]:
        """
        Insert a new portfolio

        Args:
            name: Display name (already trimmed)
            code: Candidate join code
            currency: ISO 4217 code

        Returns:
            The created Portfolio, or None if the code is already taken.
            Any other persistence failure is raised.
        """
        model = PortfolioModel(name=name, code=code, currency=currency)
        try:
            # SAVEPOINT: a collision leaves the rest of the unit of work intact
            async with self.session.begin_nested():
                self.session.add(model)
        except IntegrityError as exc:
            if is_code_unique_violation(exc):
                logger.debug(f"Portfolio code {code} already taken")
                return None
            raise

        return self._to_domain(model)

    async def get_by_id(self, portfolio_id: str) -> Optional[Portfolio]:
        model = await self.session.get(PortfolioModel, portfolio_id)
        return self._to_domain(model) if model else None

    async def get_by_code(self, code: str) -> Optional[Portfolio]:
        result = await self.session.execute(
            select(PortfolioModel).where(PortfolioModel.code == code)
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def exists(self, portfolio_id: str) -> bool:
        result = await self.session.execute(
            select(PortfolioModel.id).where(PortfolioModel.id == portfolio_id)
        )
        return result.scalar_one_or_none() is not None

    def _to_domain(self, model: PortfolioModel) -> Portfolio:
        """Convert ORM model to domain entity"""
        return Portfolio(
            id=model.id,
            name=model.name,
            code=model.code,
            currency=model.currency,
            created_at=model.created_at,
        )
