from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

from memo_app.core.errors import MemoAppError
from memo_app.core.filtering import MemoStats, compute_stats, filter_memos
from memo_app.core.models.memo import ALL_CATEGORIES
from memo_app.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from memo_app.client.api_client import MemoGateway
    from memo_app.core.models.memo import Memo, MemoCategory, MemoFormData

logger = get_logger(__name__)


class MemoStore:
    """In-memory memo state for a client session.

    Holds the full memo list plus the active search query and category filter,
    and keeps the filtered view and stats in sync after every change. Writes go
    to the gateway first and are then applied locally; a failed write reloads
    the whole list and re-raises.

    Updates and deletes take a per-memo sequence token, so a response that was
    overtaken by a newer request for the same memo is not applied. Updates also
    send the locally known ``updatedAt`` so the server rejects stale writes.
    """

    def __init__(self, gateway: MemoGateway) -> None:
        self._gateway = gateway
        self._memos: list[Memo] = []
        # nothing has been fetched yet; the first load() clears it
        self._loading = True
        self._search_query = ""
        self._selected_category: str = ALL_CATEGORIES
        self._filtered: list[Memo] = []
        self._stats = MemoStats()
        self._listeners: list[Callable[[MemoStore], None]] = []
        self._sequence = itertools.count(1)
        self._in_flight: dict[str, int] = {}

    @property
    def memos(self) -> list[Memo]:
        """Memos matching the current category filter and search query."""
        return list(self._filtered)

    @property
    def all_memos(self) -> list[Memo]:
        return list(self._memos)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def search_query(self) -> str:
        return self._search_query

    @property
    def selected_category(self) -> str:
        return self._selected_category

    @property
    def stats(self) -> MemoStats:
        return self._stats

    def subscribe(self, listener: Callable[[MemoStore], None]) -> Callable[[], None]:
        """Call ``listener`` after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def load(self) -> None:
        """Replace the local list with the full list from the gateway."""
        self._loading = True
        self._changed()
        try:
            memos = await self._gateway.list_memos()
        except MemoAppError as err:
            logger.error("Failed to load memos: %s", err.message)
            raise
        else:
            self._memos = list(memos)
        finally:
            self._loading = False
            self._changed()

    async def create(self, form: MemoFormData) -> Memo:
        try:
            memo = await self._gateway.create_memo(form)
        except MemoAppError as err:
            logger.error("Failed to create memo: %s", err.message)
            await self._resync()
            raise
        self._memos = [memo, *self._memos]
        self._changed()
        return memo

    async def update(self, memo_id: str, form: MemoFormData) -> Memo:
        token = self._begin(memo_id)
        current = self.get_by_id(memo_id)
        expected = current.updated_at if current else None
        try:
            updated = await self._gateway.update_memo(memo_id, form, expected_updated_at=expected)
        except MemoAppError as err:
            self._finish(memo_id, token)
            logger.error("Failed to update memo %s: %s", memo_id, err.message)
            await self._resync()
            raise

        if not self._finish(memo_id, token):
            logger.debug("Skipping stale update response for memo %s", memo_id)
            return updated
        self._memos = [updated if m.id == memo_id else m for m in self._memos]
        self._changed()
        return updated

    async def delete(self, memo_id: str) -> None:
        token = self._begin(memo_id)
        try:
            await self._gateway.delete_memo(memo_id)
        except MemoAppError as err:
            self._finish(memo_id, token)
            logger.error("Failed to delete memo %s: %s", memo_id, err.message)
            await self._resync()
            raise
        # A completed delete always wins locally, even over a newer pending update.
        self._finish(memo_id, token)
        self._memos = [m for m in self._memos if m.id != memo_id]
        self._changed()

    async def clear_all(self) -> None:
        try:
            await self._gateway.clear_all()
        except MemoAppError as err:
            logger.error("Failed to clear memos: %s", err.message)
            raise
        self._memos = []
        self._search_query = ""
        self._selected_category = ALL_CATEGORIES
        self._in_flight.clear()
        self._changed()

    def search(self, query: str) -> None:
        self._search_query = query
        self._changed()

    def filter_by_category(self, category: MemoCategory | str) -> None:
        self._selected_category = str(getattr(category, "value", category)) or ALL_CATEGORIES
        self._changed()

    def get_by_id(self, memo_id: str) -> Memo | None:
        return next((m for m in self._memos if m.id == memo_id), None)

    def _begin(self, memo_id: str) -> int:
        token = next(self._sequence)
        self._in_flight[memo_id] = token
        return token

    def _finish(self, memo_id: str, token: int) -> bool:
        """Release ``token``; True when it was still the latest request for the memo."""
        if self._in_flight.get(memo_id) != token:
            return False
        del self._in_flight[memo_id]
        return True

    async def _resync(self) -> None:
        try:
            await self.load()
        except MemoAppError as err:
            # the caller re-raises the original write error
            logger.warning("Reload after failed write also failed: %s", err.message)

    def _changed(self) -> None:
        self._filtered = filter_memos(
            self._memos,
            category=self._selected_category,
            query=self._search_query,
        )
        self._stats = compute_stats(self._memos, self._filtered)
        for listener in list(self._listeners):
            listener(self)
