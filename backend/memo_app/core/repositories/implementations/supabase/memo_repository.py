from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from memo_app.core.errors import ConflictError, DataAccessError
from memo_app.core.filtering import category_value
from memo_app.core.models.memo import Memo
from memo_app.core.repositories.memo_repository import MemoRepository
from memo_app.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from supabase import Client

    from memo_app.core.models.memo import MemoFormData

# PostgREST refuses an unfiltered DELETE, so "delete all" filters on an id no row can have.
NIL_UUID = "00000000-0000-0000-0000-000000000000"


class SupabaseMemoRepository(MemoRepository):
    """Supabase implementation of the MemoRepository.

    Uses Supabase's PostgREST client for CRUD against a single `memos` table with
    columns id, title, content, category, tags (text[]), created_at, updated_at.
    The id and both timestamps default server-side on insert.
    """

    TABLE_NAME = "memos"

    def __init__(self, client: Client, table_name: str | None = None) -> None:
        self._client: Client = client
        self._table_name = table_name or self.TABLE_NAME

    async def list(
        self,
        *,
        category: str | None = None,
        search_query: str | None = None,
    ) -> Sequence[Memo]:
        wanted = category_value(category)
        term = (search_query or "").strip()

        def _query():
            q = self._client.table(self._table_name).select("*").order("created_at", desc=True)
            if wanted is not None:
                q = q.eq("category", wanted)
            if term:
                pattern = self._quote_filter_value(f"%{self._escape_like(term)}%")
                q = q.or_(f"title.ilike.{pattern},content.ilike.{pattern}")
            return q.execute()

        resp = await self._run(_query, "list memos")
        items = resp.data or []
        return [self.row_to_memo(i) for i in items]

    async def get(self, memo_id: str) -> Memo | None:
        resp = await self._run(
            lambda: self._client.table(self._table_name)
            .select("*")
            .eq("id", memo_id)
            .limit(1)
            .execute(),
            "get memo",
        )
        items = resp.data or []
        if not items:
            return None
        return self.row_to_memo(items[0])

    async def create(self, form: MemoFormData) -> Memo:
        row = self.form_to_row(form)
        resp = await self._run(
            lambda: self._client.table(self._table_name)
            .insert(row)
            .execute(),
            "create memo",
        )
        items = resp.data or []
        if not items:
            raise DataAccessError("Memo could not be created: store returned no row")
        return self.row_to_memo(items[0])

    async def update(
        self,
        memo_id: str,
        form: MemoFormData,
        *,
        expected_updated_at: datetime | None = None,
    ) -> Memo | None:
        if expected_updated_at is not None and expected_updated_at.tzinfo is None:
            expected_updated_at = expected_updated_at.replace(tzinfo=UTC)

        if expected_updated_at is not None:
            floor = expected_updated_at
        else:
            # Unconditional write: the stored timestamps come from the database
            # clock, which may be ahead of ours.
            current = await self.get(memo_id)
            if current is None:
                return None
            floor = max(current.updated_at, current.created_at)
            if floor.tzinfo is None:
                floor = floor.replace(tzinfo=UTC)
        now = datetime.now(UTC)
        if now <= floor:
            now = floor + timedelta(microseconds=1)

        row = self.form_to_row(form)
        row["updated_at"] = self._format_timestamp(now)

        def _query():
            q = self._client.table(self._table_name).update(row).eq("id", memo_id)
            if expected_updated_at is not None:
                q = q.eq("updated_at", self._format_timestamp(expected_updated_at))
            return q.execute()

        resp = await self._run(_query, "update memo")
        items = resp.data or []
        if items:
            return self.row_to_memo(items[0])

        if expected_updated_at is None:
            return None
        # Nothing matched: either the memo is gone or someone saved it first.
        if await self.get(memo_id) is None:
            return None
        logger.warning("Stale memo update rejected", extra={"memo_id": memo_id})
        raise ConflictError("Memo was modified since it was loaded")

    async def delete(self, memo_id: str) -> bool:
        resp = await self._run(
            lambda: self._client.table(self._table_name)
            .delete()
            .eq("id", memo_id)
            .execute(),
            "delete memo",
        )
        items = resp.data or []
        return len(items) > 0

    async def clear_all(self) -> int:
        resp = await self._run(
            lambda: self._client.table(self._table_name)
            .delete()
            .neq("id", NIL_UUID)
            .execute(),
            "clear memos",
        )
        items = resp.data or []
        return len(items)

    @staticmethod
    async def _run(func: Callable[[], Any], action: str) -> Any:
        try:
            return await asyncio.to_thread(func)
        except Exception as err:
            message = getattr(err, "message", None) or str(err) or type(err).__name__
            logger.error(
                "Failed to %s: %s",
                action,
                message,
                extra={"error_type": type(err).__name__},
            )
            raise DataAccessError(f"Failed to {action}: {message}") from err

    @staticmethod
    def _format_timestamp(value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).isoformat().replace("+00:00", "Z")

    @staticmethod
    def _escape_like(term: str) -> str:
        """Escape LIKE wildcards so the term matches literally."""
        return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

    @staticmethod
    def _quote_filter_value(value: str) -> str:
        """Quote a value for a PostgREST logical filter (commas and parens are reserved)."""
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    @staticmethod
    def row_to_memo(row: dict[str, Any]) -> Memo:
        """Map a stored row onto the Memo shape."""
        return Memo(
            id=str(row["id"]),
            title=row.get("title") or "",
            content=row.get("content") or "",
            category=row.get("category") or "other",
            tags=row.get("tags") or [],
            created_at=row["created_at"],
            updated_at=row.get("updated_at") or row["created_at"],
        )

    @staticmethod
    def form_to_row(form: MemoFormData) -> dict[str, Any]:
        return {
            "title": form.title,
            "content": form.content,
            "category": form.category.value,
            "tags": list(form.tags),
        }
