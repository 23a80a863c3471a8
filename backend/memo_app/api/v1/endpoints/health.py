from __future__ import annotations

import asyncio

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from memo_app.config import settings
from memo_app.db.base import get_supabase_client

router = APIRouter()


@router.get("/")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "service": "memo-api",
            "version": "0.1.0"
        }
    )


@router.get("/ready")
async def readiness_check():
    """Readiness check endpoint."""
    db_status = "connected"
    try:
        client = get_supabase_client()
        await asyncio.to_thread(lambda: client.table(settings.memos_table).select("id").limit(1).execute())
    except Exception as e:
        db_status = f"error: {str(e)}"

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "ready",
            "database": db_status,
            "summaries": "configured" if settings.openai_api_key else "missing api key",
            "api_prefix": settings.api_prefix
        }
    )
