"""
Health check API route
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from blog_api.database.base import StoreError
from blog_api.database.connection import get_database

router = APIRouter()


@router.get("/health")
async def health_check():
    """Report healthy only when the document store answers a ping"""
    database = get_database()
    if database is None:
        raise HTTPException(status_code=503, detail="Health check failed: database not initialized")

    try:
        await database.ping()
    except StoreError as e:
        raise HTTPException(status_code=503, detail=f"Health check failed: {e}")

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected",
    }
