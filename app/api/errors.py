"""
Translate domain exceptions into HTTP errors
"""

from fastapi import HTTPException

from app.domain.exceptions import TrackerError


def http_error(exc: TrackerError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


def internal_error() -> HTTPException:
    """Generic failure; details stay in the server log"""
    return HTTPException(status_code=500, detail="Failed")
