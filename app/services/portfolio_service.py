# app/services/portfolio_service.py

"""
SERVICE — PORTFOLIO REGISTRY

• Creates portfolios with a unique join code
• Looks portfolios up by id or by a user-typed code
• Code collisions are retried a bounded number of times; the database
  unique constraint is the only arbiter between concurrent creators
"""

import enum
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.domain.exceptions import ValidationError
from app.domain.models import Portfolio
from app.domain.services.code_generator import generate_portfolio_code, normalize_portfolio_code
from app.infrastructure.db.repositories.portfolio_repository import PortfolioRepository

logger = logging.getLogger(__name__)

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


class CreationStatus(str, enum.Enum):
    CREATED = "CREATED"
    EXHAUSTED = "EXHAUSTED"


@dataclass(frozen=True)
class PortfolioCreation:
    """Outcome of PortfolioRegistry.create"""
    status: CreationStatus
    attempts: int
    portfolio: Optional[Portfolio] = None

    @property
    def created(self) -> bool:
        return self.status == CreationStatus.CREATED


class PortfolioRegistry:
    def __init__(
        self,
        session: AsyncSession,
        code_factory: Callable[[], str] = generate_portfolio_code,
        max_attempts: Optional[int] = None,
    ):
        self.repo = PortfolioRepository(session)
        self.code_factory = code_factory
        self.max_attempts = max_attempts or settings.CODE_MAX_ATTEMPTS

    async def create(self, name: str, currency: Optional[str] = None) -> PortfolioCreation:
        """
        Create a portfolio under a freshly generated join code

        Args:
            name: Display name; blank after trimming is rejected
            currency: ISO 4217 code, defaults to DEFAULT_CURRENCY

        Returns:
            PortfolioCreation tagged CREATED or EXHAUSTED
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Name required")

        clean_currency = (currency or "").strip().upper() or settings.DEFAULT_CURRENCY
        if not _CURRENCY_RE.match(clean_currency):
            raise ValidationError("Currency must be a 3-letter ISO code")

        for attempt in range(1, self.max_attempts + 1):
            code = self.code_factory()
            portfolio = await self.repo.insert(clean_name, code, clean_currency)
            if portfolio is not None:
                logger.info(
                    "Created portfolio | id=%s | code=%s | attempts=%s",
                    portfolio.id,
                    portfolio.code,
                    attempt,
                )
                return PortfolioCreation(CreationStatus.CREATED, attempt, portfolio)
            logger.info("Portfolio code collision | code=%s | attempt=%s", code, attempt)

        logger.error("Portfolio code space saturated after %s attempts", self.max_attempts)
        return PortfolioCreation(CreationStatus.EXHAUSTED, self.max_attempts)

    async def lookup_by_id(self, portfolio_id: str) -> Optional[Portfolio]:
        if not (portfolio_id or "").strip():
            raise ValidationError("id required")
        return await self.repo.get_by_id(portfolio_id.strip())

    async def lookup_by_code(self, raw_code: str) -> Optional[Portfolio]:
        """
        Resolve a user-typed join code ("abc123", " PORT-ABC123 ", ...)

        Returns:
            Portfolio or None; blank input raises ValidationError
        """
        code = normalize_portfolio_code(raw_code)
        if not code:
            raise ValidationError("Code required")
        return await self.repo.get_by_code(code)
