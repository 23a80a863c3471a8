from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Query, status

from memo_app.api.v1.schemas.memo import ClearResult, MemoCreate, MemoRead, MemoUpdate
from memo_app.dependencies import get_memo_service

if TYPE_CHECKING:
    from memo_app.core.services.memo_service import MemoService

router = APIRouter()


@router.get("/", response_model=list[MemoRead])
async def list_memos(
    category: str | None = Query(default=None, description='Category, or "all" for every category'),
    search: str | None = Query(default=None, description="Case-insensitive match on title or content"),
    service: MemoService = Depends(get_memo_service),
):
    """List memos newest first.

    Server-side search covers title and content only; tags are not searched.
    """
    return await service.list_memos(category=category, search_query=search)


@router.get("/{memo_id}", response_model=MemoRead)
async def get_memo(
    memo_id: str,
    service: MemoService = Depends(get_memo_service),
):
    memo = await service.get_memo(memo_id)
    if not memo:
        raise HTTPException(status_code=404, detail="Memo not found")
    return memo


@router.post("/", response_model=MemoRead, status_code=status.HTTP_201_CREATED)
async def create_memo(
    payload: MemoCreate,
    service: MemoService = Depends(get_memo_service),
):
    return await service.create_memo(payload)


@router.put("/{memo_id}", response_model=MemoRead)
async def update_memo(
    memo_id: str,
    payload: MemoUpdate,
    service: MemoService = Depends(get_memo_service),
):
    memo = await service.update_memo(
        memo_id,
        payload.to_form(),
        expected_updated_at=payload.expected_updated_at,
    )
    if not memo:
        raise HTTPException(status_code=404, detail="Memo not found")
    return memo


@router.delete("/{memo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_memo(
    memo_id: str,
    service: MemoService = Depends(get_memo_service),
):
    deleted = await service.delete_memo(memo_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Memo not found")
    return None


@router.delete("/", response_model=ClearResult)
async def clear_memos(service: MemoService = Depends(get_memo_service)):
    """Delete every memo."""
    deleted = await service.clear_memos()
    return ClearResult(deleted=deleted)
