from __future__ import annotations

import threading
from functools import lru_cache
from typing import TYPE_CHECKING

from memo_app.core.filtering import category_value
from memo_app.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from memo_app.core.models.memo import Memo, MemoFormData
    from memo_app.core.repositories.memo_repository import MemoRepository

logger = get_logger(__name__)


class MemoListCache:
    """Rendered memo lists keyed by (category, search query).

    Every successful write clears the whole cache, so a cached list is never
    older than the last write made through this process.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str | None, str], list[Memo]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(category: str | None, search_query: str | None) -> tuple[str | None, str]:
        return category_value(category), (search_query or "").strip().lower()

    def get(self, key: tuple[str | None, str]) -> list[Memo] | None:
        with self._lock:
            cached = self._entries.get(key)
            return list(cached) if cached is not None else None

    def put(self, key: tuple[str | None, str], memos: Sequence[Memo]) -> None:
        with self._lock:
            self._entries[key] = list(memos)

    def invalidate(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


@lru_cache(maxsize=1)
def get_memo_list_cache() -> MemoListCache:
    """Return the process-wide memo list cache."""
    return MemoListCache()


class MemoService:
    """Memo CRUD on top of a repository, with cached list reads."""

    def __init__(self, repo: MemoRepository, cache: MemoListCache | None = None) -> None:
        self._repo = repo
        self._cache = cache if cache is not None else MemoListCache()

    async def list_memos(
        self,
        *,
        category: str | None = None,
        search_query: str | None = None,
    ) -> Sequence[Memo]:
        """List memos newest first, optionally filtered by category and title/content search."""
        key = self._cache.key(category, search_query)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        memos = await self._repo.list(category=category, search_query=search_query)
        self._cache.put(key, memos)
        return memos

    async def get_memo(self, memo_id: str) -> Memo | None:
        return await self._repo.get(memo_id)

    async def create_memo(self, form: MemoFormData) -> Memo:
        memo = await self._repo.create(form)
        self._revalidate("create", memo.id)
        return memo

    async def update_memo(
        self,
        memo_id: str,
        form: MemoFormData,
        *,
        expected_updated_at: datetime | None = None,
    ) -> Memo | None:
        """Replace title, content, category and tags of a memo.

        Returns None when the memo does not exist. A stale ``expected_updated_at``
        raises ConflictError from the repository.
        """
        memo = await self._repo.update(memo_id, form, expected_updated_at=expected_updated_at)
        if memo is not None:
            self._revalidate("update", memo_id)
        return memo

    async def delete_memo(self, memo_id: str) -> bool:
        deleted = await self._repo.delete(memo_id)
        if deleted:
            self._revalidate("delete", memo_id)
        return deleted

    async def clear_memos(self) -> int:
        deleted = await self._repo.clear_all()
        self._revalidate("clear", None)
        logger.info("Cleared all memos", extra={"deleted": deleted})
        return deleted

    def _revalidate(self, action: str, memo_id: str | None) -> None:
        logger.debug("Invalidating memo list cache after %s of %s", action, memo_id or "all memos")
        self._cache.invalidate()
