"""
P&L ENGINE
Derive gain/loss figures from positions, watchlist items and live quotes

RESPONSIBILITIES:
- Unrealized P&L for open positions marked to a live quote
- Realized P&L for closed positions at their sale price
- Target / stop / buy-zone flags (inclusive boundaries)
- Portfolio-level totals

RULES:
- Pure functions, no I/O, no state
- Missing quote -> per-position result is None ("unknown"), never zero
- Totals fall back to cost basis for positions without a quote
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Optional

from app.domain.models import Position, Quote, WatchlistItem

ZERO = Decimal("0")
HUNDRED = Decimal("100")
PCT_QUANTUM = Decimal("0.01")


@dataclass(frozen=True)
class UnrealizedPnL:
    price: Decimal
    current_value: Decimal
    cost_basis: Decimal
    pnl: Decimal
    pnl_percent: Decimal


@dataclass(frozen=True)
class RealizedPnL:
    proceeds: Decimal
    cost_basis: Decimal
    pnl: Decimal
    pnl_percent: Decimal


@dataclass(frozen=True)
class PortfolioTotals:
    total_invested: Decimal
    total_current_value: Decimal
    total_unrealized_pnl: Decimal
    total_unrealized_pnl_percent: Decimal
    total_realized_pnl: Decimal


def _percent_change(new: Decimal, base: Decimal) -> Decimal:
    if base == ZERO:
        return ZERO
    return ((new - base) / base * HUNDRED).quantize(PCT_QUANTUM, rounding=ROUND_HALF_UP)


def _live_price(quote: Optional[Quote]) -> Optional[Decimal]:
    if quote is None or quote.price is None:
        return None
    return quote.price


def unrealized(position: Position, quote: Optional[Quote]) -> Optional[UnrealizedPnL]:
    """
    Mark an open position to a live quote.

    Returns None when no quote is available for the ticker.
    """
    price = _live_price(quote)
    if price is None:
        return None

    current_value = price * position.shares
    cost_basis = position.cost_basis
    return UnrealizedPnL(
        price=price,
        current_value=current_value,
        cost_basis=cost_basis,
        pnl=current_value - cost_basis,
        pnl_percent=_percent_change(price, position.buy_price),
    )


def realized(position: Position) -> Optional[RealizedPnL]:
    """Gain/loss of a sold position; None when it carries no sale price."""
    if position.sold_price is None:
        return None

    proceeds = position.sold_price * position.shares
    cost_basis = position.cost_basis
    return RealizedPnL(
        proceeds=proceeds,
        cost_basis=cost_basis,
        pnl=proceeds - cost_basis,
        pnl_percent=_percent_change(position.sold_price, position.buy_price),
    )


def is_at_target(position: Position, quote: Optional[Quote]) -> bool:
    price = _live_price(quote)
    return price is not None and position.sell_target is not None and price >= position.sell_target


def is_at_stop(position: Position, quote: Optional[Quote]) -> bool:
    price = _live_price(quote)
    return price is not None and position.stop_loss is not None and price <= position.stop_loss


def is_in_buy_zone(item: WatchlistItem, quote: Optional[Quote]) -> bool:
    price = _live_price(quote)
    return price is not None and item.target_buy is not None and price <= item.target_buy


def summarize(
    open_positions: Iterable[Position],
    closed_positions: Iterable[Position],
    quotes: Dict[str, Quote],
) -> PortfolioTotals:
    """
    Aggregate totals across a portfolio.

    Args:
        open_positions: Positions marked to market
        closed_positions: Positions contributing realized P&L
        quotes: Live quotes keyed by ticker symbol

    Returns:
        PortfolioTotals; every figure is 0 for empty input
    """
    invested = ZERO
    current_value = ZERO
    for position in open_positions:
        cost_basis = position.cost_basis
        invested += cost_basis
        calc = unrealized(position, quotes.get(position.ticker))
        current_value += calc.current_value if calc else cost_basis

    realized_total = ZERO
    for position in closed_positions:
        calc = realized(position)
        if calc:
            realized_total += calc.pnl

    unrealized_total = current_value - invested
    unrealized_pct = (
        (unrealized_total / invested * HUNDRED).quantize(PCT_QUANTUM, rounding=ROUND_HALF_UP)
        if invested > ZERO else ZERO
    )

    return PortfolioTotals(
        total_invested=invested,
        total_current_value=current_value,
        total_unrealized_pnl=unrealized_total,
        total_unrealized_pnl_percent=unrealized_pct,
        total_realized_pnl=realized_total,
    )
