from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from memo_app.core.errors import MemoAppError, ValidationError
from memo_app.core.models.base import AppBaseModel
from memo_app.core.models.memo import MemoCategory, MemoFormData
from memo_app.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from memo_app.client.api_client import MemoGateway
    from memo_app.client.store import MemoStore
    from memo_app.core.models.memo import Memo

logger = get_logger(__name__)


class DetailMode(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"


class MemoDraft(AppBaseModel):
    """Unvalidated form state while a memo is being edited."""

    title: str = ""
    content: str = ""
    category: MemoCategory = MemoCategory.PERSONAL
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_memo(cls, memo: Memo) -> MemoDraft:
        return cls(title=memo.title, content=memo.content, category=memo.category, tags=list(memo.tags))


class MemoDetailController:
    """State machine behind the memo detail/edit dialog.

    Opening a memo always starts in viewing mode. Escape leaves editing (dropping
    unsaved changes) or closes the dialog when already viewing; background
    clicks close only while viewing.
    """

    def __init__(
        self,
        store: MemoStore,
        gateway: MemoGateway,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._on_close = on_close
        self.memo: Memo | None = None
        self.is_open = False
        self.mode = DetailMode.VIEWING
        self.draft = MemoDraft()
        self.summary = ""
        self.summary_error = ""
        self.summarizing = False
        self.tag_input = ""
        # bumped by open() so late summary results for an earlier opening are dropped
        self._opened = 0

    @property
    def is_editing(self) -> bool:
        return self.mode is DetailMode.EDITING

    def open(self, memo: Memo) -> None:
        self.memo = memo
        self.is_open = True
        self.mode = DetailMode.VIEWING
        self.draft = MemoDraft.from_memo(memo)
        self.summary = ""
        self.summary_error = ""
        self.summarizing = False
        self.tag_input = ""
        self._opened += 1

    def close(self) -> None:
        self.is_open = False
        self.mode = DetailMode.VIEWING
        if self._on_close is not None:
            self._on_close()

    def start_edit(self) -> None:
        if self.memo is not None:
            self.mode = DetailMode.EDITING

    def cancel_edit(self) -> None:
        self.mode = DetailMode.VIEWING
        if self.memo is not None:
            self.draft = MemoDraft.from_memo(self.memo)

    def press_escape(self) -> None:
        if not self.is_open:
            return
        if self.is_editing:
            self.cancel_edit()
        else:
            self.close()

    def click_background(self) -> None:
        if self.is_editing:
            return
        self.close()

    async def save(self) -> Memo | None:
        """Send the draft to the store; returns the saved memo.

        Empty title or content is rejected before any request is made. If the
        store raises, the dialog stays in editing mode with the draft intact.
        """
        if self.memo is None or not self.is_editing:
            return None
        if not self.draft.title.strip() or not self.draft.content.strip():
            raise ValidationError("Title and content are both required")

        try:
            form = MemoFormData(
                title=self.draft.title,
                content=self.draft.content,
                category=self.draft.category,
                tags=self.draft.tags,
            )
        except PydanticValidationError as err:
            first = err.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "memo"
            raise ValidationError(f"{field}: {first['msg']}") from err
        saved = await self._store.update(self.memo.id, form)
        self.memo = saved
        self.draft = MemoDraft.from_memo(saved)
        self.mode = DetailMode.VIEWING
        return saved

    async def delete(self) -> None:
        if self.memo is None:
            return
        await self._store.delete(self.memo.id)
        self.close()

    def add_tag(self, text: str | None = None) -> None:
        """Append a tag to the draft, taken from ``text`` or else the pending tag input."""
        tag = (self.tag_input if text is None else text or "").strip()
        if not tag:
            raise ValidationError("Tag must not be empty")
        if tag in self.draft.tags:
            raise ValidationError(f"Tag '{tag}' is already on this memo")
        self.draft.tags = [*self.draft.tags, tag]
        self.tag_input = ""

    def remove_tag(self, tag: str) -> None:
        self.draft.tags = [t for t in self.draft.tags if t != tag]

    async def generate_summary(self) -> None:
        """Summarize the displayed memo; the outcome lands in summary or summary_error.

        A result is dropped once the dialog has been reopened, but saving the
        displayed memo in the meantime does not discard it.
        """
        memo = self.memo
        if memo is None or self.is_editing:
            return

        opened = self._opened
        self.summarizing = True
        self.summary = ""
        self.summary_error = ""
        try:
            summary = await self._gateway.summarize(memo.title, memo.content)
        except MemoAppError as err:
            logger.warning("Summary failed for memo %s: %s", memo.id, err.message)
            if self._opened == opened:
                self.summary_error = err.message
        else:
            if self._opened == opened:
                self.summary = summary
        finally:
            if self._opened == opened:
                self.summarizing = False
