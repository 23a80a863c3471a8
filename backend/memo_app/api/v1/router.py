from __future__ import annotations

from fastapi import APIRouter

from .endpoints import health, memos, metadata, summarize

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(memos.router, prefix="/memos", tags=["memos"])
api_router.include_router(summarize.router, tags=["summaries"])
api_router.include_router(metadata.router, prefix="/metadata", tags=["metadata"])
