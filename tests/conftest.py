from decimal import Decimal
from typing import AsyncGenerator, Dict, Iterable, Optional

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.infrastructure.db.database import Base, get_db
from app.infrastructure.db import models  # noqa: F401
from app.infrastructure.market_data.types import MarketDataError, RawQuote
from app.api.routes import admin, health, market_data, portfolio, positions, watchlist
from app.services.quote_service import QuoteGateway, get_quote_gateway


class StubMarketData:
    """Market data provider answering from a fixed price table"""

    def __init__(
        self,
        prices: Optional[Dict[str, str]] = None,
        previous_closes: Optional[Dict[str, str]] = None,
        failing: Iterable[str] = (),
    ):
        self.prices = dict(prices or {})
        self.previous_closes = dict(previous_closes or {})
        self.failing = set(failing)
        self.calls = []

    async def fetch_quote(self, symbol: str) -> RawQuote:
        self.calls.append(symbol)
        if symbol in self.failing or symbol not in self.prices:
            raise MarketDataError(f"no quote for {symbol}")
        previous = self.previous_closes.get(symbol)
        return RawQuote(
            symbol=symbol,
            price=Decimal(self.prices[symbol]),
            previous_close=Decimal(previous) if previous is not None else None,
            name=f"{symbol} Inc",
            market_state="REGULAR",
        )

    async def aclose(self) -> None:
        return None


@pytest.fixture()
async def db_engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        echo=False
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        # Let SQLAlchemy own BEGIN so SAVEPOINT works with aiosqlite
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest.fixture()
def stub_market_data() -> StubMarketData:
    return StubMarketData(
        prices={"AAPL": "120", "MSFT": "300"},
        previous_closes={"AAPL": "100", "MSFT": "310"},
    )


@pytest.fixture()
def quote_gateway(stub_market_data) -> QuoteGateway:
    return QuoteGateway(stub_market_data, cache_ttl_seconds=60)


@pytest.fixture()
async def app(db_session, quote_gateway) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, tags=["Health"])
    app.include_router(admin.router, prefix="/api/v1", tags=["Admin"])
    app.include_router(portfolio.router, prefix="/api/v1/portfolios", tags=["Portfolios"])
    app.include_router(positions.router, prefix="/api/v1/positions", tags=["Positions"])
    app.include_router(watchlist.router, prefix="/api/v1/watchlist", tags=["Watchlist"])
    app.include_router(market_data.router, prefix="/api/v1/prices", tags=["Market Data"])

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quote_gateway] = lambda: quote_gateway

    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def market_data_factory():
    return StubMarketData
