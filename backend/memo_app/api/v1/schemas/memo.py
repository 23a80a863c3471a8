from __future__ import annotations

from datetime import datetime  # noqa: TCH003

from pydantic import Field

from memo_app.core.models.base import CamelModel
from memo_app.core.models.memo import Memo, MemoFormData

MemoRead = Memo
MemoCreate = MemoFormData


class MemoUpdate(MemoFormData):
    """Full replacement of a memo's editable fields.

    ``expectedUpdatedAt`` makes the write conditional: it is rejected with 409
    when the memo was saved by someone else after the client loaded it.
    """

    expected_updated_at: datetime | None = Field(
        default=None,
        description="updatedAt of the memo as last seen by the client",
    )

    def to_form(self) -> MemoFormData:
        return MemoFormData.model_validate(self.model_dump(exclude={"expected_updated_at"}))


class ClearResult(CamelModel):
    deleted: int


class CategoryRead(CamelModel):
    value: str
    label: str
