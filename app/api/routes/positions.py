"""
Position API Routes
Add, list, edit, sell and delete positions
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.api.errors import http_error, internal_error
from app.domain.exceptions import TrackerError
from app.domain.models import PositionStatus
from app.domain.schemas.position import (
    PositionCreateRequest,
    PositionResponse,
    PositionSellRequest,
    PositionUpdateRequest,
)
from app.infrastructure.db.database import get_db
from app.services.position_service import PositionLedger

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[PositionResponse])
async def list_positions(
    portfolio_id: str = Query(...),
    status: PositionStatus = Query(PositionStatus.OPEN),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    try:
        positions = await PositionLedger(db).list(portfolio_id, status, search)
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Get positions error: {e}", exc_info=True)
        raise internal_error()
    return [PositionResponse.from_domain(p) for p in positions]


@router.post("", response_model=PositionResponse, status_code=201)
async def add_position(request: PositionCreateRequest, db: AsyncSession = Depends(get_db)):
    try:
        position = await PositionLedger(db).add(request)
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Add position error: {e}", exc_info=True)
        raise internal_error()
    return PositionResponse.from_domain(position)


@router.patch("/{position_id}", response_model=PositionResponse)
async def edit_position(
    position_id: str,
    request: PositionUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Partial edit. Status and sold fields cannot be set here; use /sell.
    """
    try:
        position = await PositionLedger(db).edit(position_id, request)
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Update position error: {e}", exc_info=True)
        raise internal_error()
    return PositionResponse.from_domain(position)


@router.post("/{position_id}/sell", response_model=PositionResponse)
async def sell_position(
    position_id: str,
    request: PositionSellRequest,
    db: AsyncSession = Depends(get_db),
):
    try:
        position = await PositionLedger(db).sell(position_id, request.sold_price, request.sold_date)
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Sell position error: {e}", exc_info=True)
        raise internal_error()
    return PositionResponse.with_pnl(position, None)


@router.delete("/{position_id}")
async def delete_position(position_id: str, db: AsyncSession = Depends(get_db)):
    try:
        await PositionLedger(db).delete(position_id)
    except TrackerError as exc:
        raise http_error(exc)
    except Exception as e:
        logger.error(f"Delete position error: {e}", exc_info=True)
        raise internal_error()
    return {"success": True}
