from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from memo_app.core.models.base import CamelModel
from memo_app.core.models.memo import ALL_CATEGORIES

if TYPE_CHECKING:
    from collections.abc import Sequence

    from memo_app.core.models.memo import Memo


class MemoStats(CamelModel):
    """Aggregate counts shown next to the memo list."""

    total: int = 0
    by_category: dict[str, int] = Field(default_factory=dict)
    filtered: int = 0


def category_value(category: object) -> str | None:
    """Return the plain category string, or None when no filter applies."""
    if category is None:
        return None
    value = getattr(category, "value", category)
    if not isinstance(value, str) or not value or value == ALL_CATEGORIES:
        return None
    return value


def memo_matches_query(memo: Memo, query: str) -> bool:
    """Case-insensitive substring match on title, content or any tag."""
    needle = query.strip().lower()
    if not needle:
        return True
    return (
        needle in memo.title.lower()
        or needle in memo.content.lower()
        or any(needle in tag.lower() for tag in memo.tags)
    )


def filter_memos(
    memos: Sequence[Memo],
    *,
    category: object = ALL_CATEGORIES,
    query: str = "",
) -> list[Memo]:
    """Apply the category filter, then the search query. Order is preserved."""
    wanted = category_value(category)
    filtered = [m for m in memos if wanted is None or m.category.value == wanted]
    if query and query.strip():
        filtered = [m for m in filtered if memo_matches_query(m, query)]
    return filtered


def compute_stats(memos: Sequence[Memo], filtered: Sequence[Memo]) -> MemoStats:
    by_category: dict[str, int] = {}
    for memo in memos:
        by_category[memo.category.value] = by_category.get(memo.category.value, 0) + 1
    return MemoStats(total=len(memos), by_category=by_category, filtered=len(filtered))
