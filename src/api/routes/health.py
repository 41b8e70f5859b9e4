"""
Health check API route
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from config.settings import ENV
from database.connection import check_database

router = APIRouter()

@router.get("/api/health")
async def health_check():
    """Health check - reports unhealthy only when the store is unreachable"""
    try:
        await check_database()
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Health check failed: {str(e)}")

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected",
        "environment": ENV
    }
