import pytest


@pytest.fixture()
async def portfolio_id(client):
    response = await client.post("/api/v1/portfolios", json={"name": "Watchers"})
    return response.json()["id"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_watchlist_crud(client, portfolio_id):
    created = await client.post(
        "/api/v1/watchlist",
        json={"portfolio_id": portfolio_id, "ticker": "nvda", "company_name": "Nvidia", "target_buy": 450},
    )
    assert created.status_code == 201
    item = created.json()
    assert item["ticker"] == "NVDA"
    assert item["target_buy"] == 450

    listed = await client.get("/api/v1/watchlist", params={"portfolio_id": portfolio_id})
    assert [i["ticker"] for i in listed.json()] == ["NVDA"]

    deleted = await client.delete(f"/api/v1/watchlist/{item['id']}")
    again = await client.delete(f"/api/v1/watchlist/{item['id']}")
    assert deleted.json() == {"success": True}
    assert again.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_watchlist_validation(client, portfolio_id):
    blank = await client.post("/api/v1/watchlist", json={"portfolio_id": portfolio_id, "ticker": ""})
    negative = await client.post(
        "/api/v1/watchlist", json={"portfolio_id": portfolio_id, "ticker": "NVDA", "target_buy": -1}
    )
    orphan = await client.post("/api/v1/watchlist", json={"portfolio_id": "missing", "ticker": "NVDA"})

    assert blank.status_code == 400
    assert negative.status_code == 400
    assert orphan.status_code == 404
