"""
Database Models (SQLAlchemy ORM)
Portfolios own positions and watchlist items; children cascade on delete.
"""

from sqlalchemy import (
    Column, String, Numeric, Date, DateTime,
    ForeignKey, Text, Index, CheckConstraint,
)
from sqlalchemy.orm import relationship
import enum
import uuid

from app.infrastructure.db.database import Base
from app.utils.time import now_utc_naive


def _new_id() -> str:
    return str(uuid.uuid4())


# Enums
class PositionStatusEnum(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


# Tables

class PortfolioModel(Base):
    """Shared portfolio, addressed by id or join code"""
    __tablename__ = "pt_portfolios"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    code = Column(String(16), nullable=False, unique=True)
    currency = Column(String(3), nullable=False, default="USD")
    created_at = Column(DateTime, nullable=False, default=now_utc_naive)

    # Relationships
    positions = relationship(
        "PositionModel",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    watchlist_items = relationship(
        "WatchlistItemModel",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class PositionModel(Base):
    """Stock position; sold_* columns are set only when status is closed"""
    __tablename__ = "pt_positions"

    id = Column(String(36), primary_key=True, default=_new_id)
    portfolio_id = Column(
        String(36),
        ForeignKey("pt_portfolios.id", ondelete="CASCADE"),
        nullable=False,
    )
    ticker = Column(String(20), nullable=False)
    company_name = Column(Text, nullable=True)
    shares = Column(Numeric(18, 6), nullable=False, default=0)
    buy_price = Column(Numeric(18, 4), nullable=False, default=0)
    buy_date = Column(Date, nullable=True)
    sell_target = Column(Numeric(18, 4), nullable=True)
    stop_loss = Column(Numeric(18, 4), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(10), nullable=False, default=PositionStatusEnum.OPEN.value)
    sold_price = Column(Numeric(18, 4), nullable=True)
    sold_date = Column(Date, nullable=True)
    created_at = Column(DateTime, nullable=False, default=now_utc_naive)

    # Relationships
    portfolio = relationship("PortfolioModel", back_populates="positions")

    # Indexes
    __table_args__ = (
        Index("idx_pt_positions_portfolio", "portfolio_id"),
        Index("idx_pt_positions_status", "status"),
        CheckConstraint(
            "(status = 'open' AND sold_price IS NULL AND sold_date IS NULL) OR "
            "(status = 'closed' AND sold_price IS NOT NULL AND sold_date IS NOT NULL)",
            name="ck_pt_positions_sold_fields",
        ),
    )


class WatchlistItemModel(Base):
    """Ticker watched for a buy opportunity"""
    __tablename__ = "pt_watchlist"

    id = Column(String(36), primary_key=True, default=_new_id)
    portfolio_id = Column(
        String(36),
        ForeignKey("pt_portfolios.id", ondelete="CASCADE"),
        nullable=False,
    )
    ticker = Column(String(20), nullable=False)
    company_name = Column(Text, nullable=True)
    target_buy = Column(Numeric(18, 4), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=now_utc_naive)

    # Relationships
    portfolio = relationship("PortfolioModel", back_populates="watchlist_items")

    __table_args__ = (
        Index("idx_pt_watchlist_portfolio", "portfolio_id"),
    )
