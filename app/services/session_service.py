# app/services/session_service.py

"""
SERVICE — PORTFOLIO SESSION

Remembers which portfolio a client is working in across restarts. Only the
portfolio id is stored; the portfolio itself is always re-read from the
registry on restore.

A presentation client keeps one PortfolioSession for its lifetime:

    session = PortfolioSession()
    async with async_session_factory() as db:
        portfolio = await session.restore(PortfolioRegistry(db))
    if portfolio is None:
        ...  # show create / join, then session.activate(created_or_joined)

and calls session.clear() when the user leaves the portfolio.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from app.config import settings
from app.domain.models import Portfolio
from app.services.portfolio_service import PortfolioRegistry

logger = logging.getLogger(__name__)


class PortfolioSession:
    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or settings.SESSION_FILE)
        self.portfolio: Optional[Portfolio] = None

    @property
    def active(self) -> bool:
        return self.portfolio is not None

    def stored_portfolio_id(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning(f"Ignoring unreadable session file {self.path}: {exc}")
            return None
        portfolio_id = data.get("portfolio_id") if isinstance(data, dict) else None
        return portfolio_id if isinstance(portfolio_id, str) and portfolio_id.strip() else None

    async def restore(self, registry: PortfolioRegistry) -> Optional[Portfolio]:
        """
        Reload the remembered portfolio from the registry

        A portfolio that no longer exists clears the session.
        """
        portfolio_id = self.stored_portfolio_id()
        if portfolio_id is None:
            self.portfolio = None
            return None

        portfolio = await registry.lookup_by_id(portfolio_id)
        if portfolio is None:
            logger.info(f"Stored portfolio {portfolio_id} no longer exists; clearing session")
            self.clear()
            return None

        self.portfolio = portfolio
        return portfolio

    def activate(self, portfolio: Portfolio) -> None:
        self.portfolio = portfolio
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"portfolio_id": portfolio.id}), encoding="utf-8")

    def clear(self) -> None:
        self.portfolio = None
        self.path.unlink(missing_ok=True)
