import pytest

from app.api.routes import portfolio as portfolio_routes
from app.services.portfolio_service import PortfolioRegistry


async def _create(client, name="Family Fund", **extra):
    response = await client.post("/api/v1/portfolios", json={"name": name, **extra})
    assert response.status_code == 201, response.text
    return response.json()


async def _add_position(client, portfolio_id, ticker, shares=10, buy_price=100, **extra):
    response = await client.post(
        "/api/v1/positions",
        json={"portfolio_id": portfolio_id, "ticker": ticker, "shares": shares, "buy_price": buy_price, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_portfolio(client):
    data = await _create(client, name="  Family Fund ")

    assert data["name"] == "Family Fund"
    assert data["code"].startswith("PORT-")
    assert len(data["code"]) == 9
    assert data["currency"] == "USD"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_portfolio_blank_name(client):
    response = await client.post("/api/v1/portfolios", json={"name": "   "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Name required"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_portfolio_code_space_exhausted(client, monkeypatch):
    class CollidingRegistry(PortfolioRegistry):
        def __init__(self, session):
            super().__init__(session, code_factory=lambda: "PORT-AAAA", max_attempts=3)

    monkeypatch.setattr(portfolio_routes, "PortfolioRegistry", CollidingRegistry)

    first = await client.post("/api/v1/portfolios", json={"name": "First"})
    second = await client.post("/api/v1/portfolios", json={"name": "Second"})

    assert first.status_code == 201
    assert second.status_code == 503
    assert "Try again" in second.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_join_and_get_portfolio(client):
    created = await _create(client)
    typed = created["code"].lower().replace("port-", "")

    joined = await client.post("/api/v1/portfolios/join", json={"code": f"  {typed} "})
    fetched = await client.get(f"/api/v1/portfolios/{created['id']}")

    assert joined.status_code == 200
    assert joined.json()["id"] == created["id"]
    assert fetched.json()["code"] == created["code"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_join_errors(client):
    blank = await client.post("/api/v1/portfolios/join", json={"code": " "})
    unknown = await client.post("/api/v1/portfolios/join", json={"code": "PORT-ZZZZ"})
    missing = await client.get("/api/v1/portfolios/00000000-0000-0000-0000-000000000000")

    assert blank.status_code == 400
    assert unknown.status_code == 404
    assert unknown.json()["detail"] == "Portfolio not found. Check your code."
    assert missing.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_dashboard_marks_positions_to_market(client):
    portfolio = await _create(client)
    pid = portfolio["id"]
    await _add_position(client, pid, "AAPL", sell_target=120, stop_loss=90)
    await _add_position(client, pid, "NVDA", shares=2, buy_price=500)
    sold = await _add_position(client, pid, "MSFT", shares=5, buy_price=200)
    await client.post(f"/api/v1/positions/{sold['id']}/sell", json={"sold_price": 250, "sold_date": "2026-03-02"})
    await client.post("/api/v1/watchlist", json={"portfolio_id": pid, "ticker": "MSFT", "target_buy": 310})

    response = await client.get(f"/api/v1/portfolios/{pid}/dashboard")

    assert response.status_code == 200
    data = response.json()
    rows = {row["ticker"]: row for row in data["open_positions"]}

    assert rows["AAPL"]["current_price"] == 120
    assert rows["AAPL"]["pnl"]["pnl"] == 200
    assert rows["AAPL"]["pnl"]["pnl_percent"] == 20
    assert rows["AAPL"]["at_target"] is True
    assert rows["AAPL"]["at_stop"] is False

    # no quote for NVDA: row stays unknown, totals use cost basis
    assert rows["NVDA"]["pnl"] is None
    assert rows["NVDA"]["current_price"] is None
    assert data["prices_missing"] == ["NVDA"]

    totals = data["totals"]
    assert totals["total_invested"] == 2000
    assert totals["total_current_value"] == 2200
    assert totals["total_unrealized_pnl"] == 200
    assert totals["total_unrealized_pnl_percent"] == 10
    assert totals["total_realized_pnl"] == 250

    assert data["closed_positions"][0]["pnl"]["pnl"] == 250
    assert data["watchlist"][0]["in_buy_zone"] is True
    assert data["watchlist"][0]["current_price"] == 300


@pytest.mark.asyncio
@pytest.mark.integration
async def test_dashboard_of_empty_portfolio(client):
    portfolio = await _create(client)

    data = (await client.get(f"/api/v1/portfolios/{portfolio['id']}/dashboard")).json()

    assert data["open_positions"] == []
    assert data["prices_missing"] == []
    assert data["totals"] == {
        "total_invested": 0,
        "total_current_value": 0,
        "total_unrealized_pnl": 0,
        "total_unrealized_pnl_percent": 0,
        "total_realized_pnl": 0,
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_dashboard_unknown_portfolio(client):
    response = await client.get("/api/v1/portfolios/nope/dashboard")
    assert response.status_code == 404
