from typing import List, Optional

from pydantic import BaseModel

from app.domain.models import Quote


class QuoteResponse(BaseModel):
    symbol: str
    price: float
    change: float
    change_percent: float
    previous_close: Optional[float] = None
    name: str
    market_state: str

    @classmethod
    def from_domain(cls, quote: Quote) -> "QuoteResponse":
        return cls(
            symbol=quote.symbol,
            price=float(quote.price),
            change=float(quote.change),
            change_percent=float(quote.change_percent),
            previous_close=float(quote.previous_close) if quote.previous_close is not None else None,
            name=quote.name,
            market_state=quote.market_state,
        )


class QuoteBatchResponse(BaseModel):
    quotes: List[QuoteResponse]
    missing: List[str]
