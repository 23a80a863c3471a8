from __future__ import annotations

from fastapi import APIRouter

from memo_app.api.v1.schemas.memo import CategoryRead
from memo_app.core.models.memo import MemoCategory

router = APIRouter()


@router.get("/categories", response_model=list[CategoryRead])
async def list_categories() -> list[CategoryRead]:
    """Return all memo categories for client-side filtering.

    The "all" filter value is not a category and is not listed.
    """
    return [CategoryRead(value=c.value, label=c.label) for c in MemoCategory]
