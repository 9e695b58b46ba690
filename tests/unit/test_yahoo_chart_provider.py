from decimal import Decimal

import httpx
import pytest

from app.infrastructure.market_data.provider_factory import build_provider
from app.infrastructure.market_data.types import MarketDataError
from app.infrastructure.market_data.yahoo_chart_provider import YahooChartProvider, parse_chart_payload
from app.infrastructure.market_data.yfinance_provider import YFinanceProvider


def _chart(meta):
    return {"chart": {"result": [{"meta": meta}], "error": None}}


def test_parse_chart_payload_reads_meta():
    raw = parse_chart_payload(
        "AAPL",
        _chart({
            "symbol": "AAPL",
            "regularMarketPrice": 189.5,
            "chartPreviousClose": 187.25,
            "longName": "Apple Inc.",
            "shortName": "Apple",
            "marketState": "REGULAR",
        }),
    )
    assert raw.price == Decimal("189.5")
    assert raw.previous_close == Decimal("187.25")
    assert raw.name == "Apple Inc."
    assert raw.market_state == "REGULAR"


def test_parse_chart_payload_fallbacks():
    raw = parse_chart_payload("MSFT", _chart({"regularMarketPrice": 300, "previousClose": 310, "shortName": "Microsoft"}))
    assert raw.symbol == "MSFT"
    assert raw.previous_close == Decimal("310")
    assert raw.name == "Microsoft"
    assert raw.market_state == "UNKNOWN"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"chart": {"result": None, "error": {"code": "Not Found"}}},
        _chart({"symbol": "XXXX"}),
        _chart({"regularMarketPrice": 0}),
    ],
)
def test_parse_chart_payload_rejects_unusable_payloads(payload):
    with pytest.raises(MarketDataError):
        parse_chart_payload("XXXX", payload)


@pytest.mark.asyncio
async def test_fetch_quote_over_http():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=_chart({"regularMarketPrice": 42.1, "chartPreviousClose": 40}))

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    provider = YahooChartProvider(client=client)

    raw = await provider.fetch_quote("BRK.B")

    assert seen["path"] == "/v8/finance/chart/BRK.B"
    assert seen["params"] == {"range": "1d", "interval": "1d"}
    assert raw.price == Decimal("42.1")
    await client.aclose()


@pytest.mark.asyncio
async def test_fetch_quote_non_200_is_market_data_error():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(404, text="nope")))
    provider = YahooChartProvider(client=client)

    with pytest.raises(MarketDataError):
        await provider.fetch_quote("ZZZZ")
    await client.aclose()


@pytest.mark.asyncio
async def test_fetch_quote_transport_error_is_market_data_error():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    with pytest.raises(MarketDataError):
        await YahooChartProvider(client=client).fetch_quote("AAPL")
    await client.aclose()


def test_build_provider_by_name():
    assert isinstance(build_provider("yfinance"), YFinanceProvider)
    assert isinstance(build_provider(""), YFinanceProvider)
    assert isinstance(build_provider("Yahoo_Chart"), YahooChartProvider)
    with pytest.raises(ValueError):
        build_provider("bloomberg")
