"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    PositionStatus,

    # Entities
    Portfolio,
    Position,
    Quote,
    WatchlistItem,
)

__all__ = [
    # Enums
    "PositionStatus",

    # Entities
    "Portfolio",
    "Position",
    "Quote",
    "WatchlistItem",
]
