from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends

from memo_app.config import settings
from memo_app.core.repositories.implementations.supabase.memo_repository import (
    SupabaseMemoRepository,
)
from memo_app.core.services.memo_service import MemoService, get_memo_list_cache
from memo_app.core.services.summary_service import SummaryService
from memo_app.db.base import get_supabase_client
from memo_app.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from supabase import Client

    from memo_app.core.repositories.memo_repository import MemoRepository


def get_memo_repository(client: Client = Depends(get_supabase_client)) -> MemoRepository:
    """Get a memo repository bound to the shared Supabase client."""
    return SupabaseMemoRepository(client, table_name=settings.memos_table)


def get_memo_service(repo: MemoRepository = Depends(get_memo_repository)) -> MemoService:
    """Get a request-scoped memo service sharing the process-wide list cache."""
    return MemoService(repo, get_memo_list_cache())


def get_summary_service() -> SummaryService:
    """Get a summary service; the OpenAI client is resolved lazily per call."""
    return SummaryService()
