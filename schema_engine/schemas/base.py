"""Base Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Read model built from ORM rows or plain mappings."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True, validate_default=True)


class FrozenSchema(BaseModel):
    """Immutable derived value, safe to share between cache readers."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True, validate_default=True, frozen=True)
