from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.api.errors import internal_error
from app.infrastructure.db.database import create_tables, get_db

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/init")
async def init_database(db: AsyncSession = Depends(get_db)):
    """Create tables and indexes if they do not exist yet"""
    try:
        await create_tables(db.bind)
    except Exception as e:
        logger.error(f"DB init error: {e}", exc_info=True)
        raise internal_error()
    logger.info("Database schema ensured")
    return {"success": True}
