from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime  # noqa: TCH003
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from memo_app.core.models.memo import Memo, MemoFormData


class MemoRepository(ABC):
    """Abstract repository interface for memos.

    Contract used by services and dependency injection. Implementations perform
    I/O against the data store and therefore expose async methods. Store
    failures surface as ``DataAccessError``.
    """

    @abstractmethod
    async def list(
        self,
        *,
        category: str | None = None,
        search_query: str | None = None,
    ) -> Sequence[Memo]:  # pragma: no cover - interface only
        """Return memos, newest created first.

        Args:
            category: Exact category match; None or "all" disables the filter
            search_query: Case-insensitive substring matched against title or content
        """

    @abstractmethod
    async def get(self, memo_id: str) -> Memo | None:  # pragma: no cover
        """Fetch a memo by id or return None if not found."""

    @abstractmethod
    async def create(self, form: MemoFormData) -> Memo:  # pragma: no cover
        """Persist a new memo and return it with server-assigned id and timestamps."""

    @abstractmethod
    async def update(
        self,
        memo_id: str,
        form: MemoFormData,
        *,
        expected_updated_at: datetime | None = None,
    ) -> Memo | None:  # pragma: no cover
        """Replace the editable fields of a memo and refresh updated_at.

        Returns None if the memo does not exist. When ``expected_updated_at`` is
        given and no longer matches the stored value, raises ``ConflictError``.
        """

    @abstractmethod
    async def delete(self, memo_id: str) -> bool:  # pragma: no cover
        """Delete a memo by id. Return True if a row was removed, False otherwise."""

    @abstractmethod
    async def clear_all(self) -> int:  # pragma: no cover
        """Delete every memo and return the number of removed rows."""
