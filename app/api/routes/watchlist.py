"""
Watchlist API Routes
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.api.errors import http_error, internal_error
from app.domain.exceptions import TrackerError
from app.domain.schemas.watchlist import WatchlistItemCreateRequest, WatchlistItemResponse
from app.infrastructure.db.database import get_db
from app.services.watchlist_service import WatchlistStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[WatchlistItemResponse])
async def list_watchlist(
    portfolio_id: str = Query(...),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    try:
        items = await WatchlistStore(db).list(portfolio_id, search)
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Get watchlist error: {e}", exc_info=True)
        raise internal_error()
    return [WatchlistItemResponse.from_domain(item) for item in items]


@router.post("", response_model=WatchlistItemResponse, status_code=status.HTTP_201_CREATED)
async def add_watchlist_item(request: WatchlistItemCreateRequest, db: AsyncSession = Depends(get_db)):
    try:
        item = await WatchlistStore(db).add(request)
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Add watchlist error: {e}", exc_info=True)
        raise internal_error()
    return WatchlistItemResponse.from_domain(item)


@router.delete("/{item_id}")
async def delete_watchlist_item(item_id: str, db: AsyncSession = Depends(get_db)):
    try:
        await WatchlistStore(db).delete(item_id)
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Delete watchlist error: {e}", exc_info=True)
        raise internal_error()
    return {"success": True}
