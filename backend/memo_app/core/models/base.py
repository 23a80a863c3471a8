from __future__ import annotations

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel


class AppBaseModel(PydanticBaseModel):
    """Base model for all domain models."""

    model_config = ConfigDict(
        from_attributes=True,
        extra="forbid",
        populate_by_name=True,
    )


class CamelModel(AppBaseModel):
    """Base model serialized with camelCase keys (createdAt, updatedAt, ...)."""

    model_config = ConfigDict(alias_generator=to_camel)
