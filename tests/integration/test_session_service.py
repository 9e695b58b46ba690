import json

import pytest

from app.services.portfolio_service import PortfolioRegistry
from app.services.session_service import PortfolioSession


@pytest.mark.asyncio
@pytest.mark.integration
async def test_activate_then_restore(db_session, tmp_path):
    registry = PortfolioRegistry(db_session)
    portfolio = (await registry.create("Remembered")).portfolio
    path = tmp_path / "session.json"

    PortfolioSession(path).activate(portfolio)
    assert json.loads(path.read_text()) == {"portfolio_id": portfolio.id}

    fresh = PortfolioSession(path)
    assert not fresh.active
    restored = await fresh.restore(registry)

    assert fresh.active
    assert restored.code == portfolio.code


@pytest.mark.asyncio
@pytest.mark.integration
async def test_restore_with_vanished_portfolio_clears_session(db_session, tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"portfolio_id": "gone"}))
    session = PortfolioSession(path)

    assert await session.restore(PortfolioRegistry(db_session)) is None
    assert not session.active
    assert not path.exists()


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("content", ["not json", "[]", '{"portfolio_id": ""}', '{"code": "PORT-7X3K"}'])
async def test_unreadable_session_restores_nothing(db_session, tmp_path, content):
    path = tmp_path / "session.json"
    path.write_text(content)

    session = PortfolioSession(path)
    assert await session.restore(PortfolioRegistry(db_session)) is None
    assert not session.active


@pytest.mark.asyncio
@pytest.mark.integration
async def test_clear_forgets_portfolio(db_session, tmp_path):
    portfolio = (await PortfolioRegistry(db_session).create("Leaving")).portfolio
    path = tmp_path / "session.json"
    session = PortfolioSession(path)
    session.activate(portfolio)

    session.clear()
    session.clear()

    assert not session.active
    assert not path.exists()
