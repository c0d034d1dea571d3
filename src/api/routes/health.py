"""
Health check API route
"""

from datetime import datetime
import asyncpg
from fastapi import APIRouter, HTTPException, Depends
from database.connection import get_db_pool

router = APIRouter()

@router.get("/health")
async def health_check(db_pool: asyncpg.Pool = Depends(get_db_pool)):
    """Report healthy when the database answers a trivial query"""
    try:
        async with db_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")

        return {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
            "database": "connected"
        }

    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Health check failed: {str(e)}")
