"""
Market Data API Routes
Live quotes for the polling UI; failures show up as missing symbols
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response
import logging

from app.config import settings
from app.domain.schemas.quote import QuoteBatchResponse, QuoteResponse
from app.services.quote_service import QuoteGateway, get_quote_gateway, normalize_symbols

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=QuoteBatchResponse)
async def get_prices(
    response: Response,
    tickers: str = Query(""),
    gateway: QuoteGateway = Depends(get_quote_gateway),
):
    """
    Quotes for a comma-separated ticker list, e.g. ?tickers=AAPL,MSFT
    """
    symbols = normalize_symbols(tickers.split(","))
    if not symbols:
        raise HTTPException(status_code=400, detail="tickers required")

    batch = await gateway.get_quotes(symbols)

    ttl = settings.QUOTE_CACHE_TTL_SECONDS
    response.headers["Cache-Control"] = f"public, s-maxage={ttl}, stale-while-revalidate={ttl * 2}"
    return QuoteBatchResponse(
        quotes=[QuoteResponse.from_domain(q) for q in batch.quotes],
        missing=batch.missing,
    )
