from __future__ import annotations

from datetime import datetime  # noqa: TCH003
from enum import Enum

from pydantic import Field, field_validator

from .base import CamelModel

ALL_CATEGORIES = "all"


class MemoCategory(str, Enum):
    """Topic a memo is filed under."""

    PERSONAL = "personal"
    WORK = "work"
    STUDY = "study"
    IDEA = "idea"
    OTHER = "other"

    @property
    def label(self) -> str:
        return self.value.capitalize()


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Strip tags, drop empty ones and keep the first occurrence of duplicates."""
    normalized: list[str] = []
    for tag in tags or []:
        if not isinstance(tag, str):
            continue
        stripped = tag.strip()
        if stripped and stripped not in normalized:
            normalized.append(stripped)
    return normalized


class Memo(CamelModel):
    """Memo domain model as stored and as returned to clients."""

    id: str = Field(description="Server-generated identifier")
    title: str = Field(description="Memo title")
    content: str = Field(description="Markdown content")
    category: MemoCategory = Field(description="Topic category")
    tags: list[str] = Field(default_factory=list, description="Tags, unique within the memo")
    created_at: datetime
    updated_at: datetime

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "7d0e9a52-4d1f-4f0e-9a5e-2a1c5b0c8f11",
                    "title": "Groceries",
                    "content": "milk, eggs",
                    "category": "personal",
                    "tags": ["home"],
                    "createdAt": "2026-10-18T09:30:00+00:00",
                    "updatedAt": "2026-10-18T09:30:00+00:00",
                }
            ]
        }
    }


class MemoFormData(CamelModel):
    """Editable part of a memo, used as the create and update payload."""

    title: str = Field(max_length=255, description="Memo title")
    content: str = Field(max_length=20000, description="Markdown content")
    category: MemoCategory = Field(default=MemoCategory.PERSONAL)
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", "content")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be empty")
        return stripped

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)

    @classmethod
    def from_memo(cls, memo: Memo) -> MemoFormData:
        return cls(
            title=memo.title,
            content=memo.content,
            category=memo.category,
            tags=list(memo.tags),
        )
