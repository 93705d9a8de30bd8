"""Output shapes of the schema resolver and its context adapters."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from schema_engine.models.enums import PopulationMode
from schema_engine.schemas.base import FrozenSchema


class ResolvedOption(FrozenSchema):
    option_id: int
    value: str
    display_label: str
    color: Optional[str] = None
    icon: Optional[str] = None


class ResolvedField(FrozenSchema):
    """Effective configuration of one field in one (tenant, brand, category, asset type) context.

    Carries both the legacy boolean shape (``is_visible``,
    ``is_upload_visible``, ``is_filterable``) and the show/hide shape
    (``show_on_upload``, ``show_on_edit``, ``show_in_filters``).
    """

    field_id: int
    key: str
    display_label: str
    type: str
    group_key: Optional[str] = None
    applies_to: str
    display_widget: Optional[str] = None
    is_visible: bool
    is_upload_visible: bool
    is_filterable: bool
    is_internal_only: bool
    population_mode: str = PopulationMode.MANUAL.value
    show_on_upload: bool = True
    show_on_edit: bool = True
    show_in_filters: bool = True
    readonly: bool = False
    is_primary: bool = False
    is_required: bool = False
    options: list[ResolvedOption] = Field(default_factory=list)

    @property
    def is_system_locked(self) -> bool:
        return self.population_mode == PopulationMode.AUTOMATIC.value and self.readonly


class ResolvedSchema(FrozenSchema):
    fields: list[ResolvedField] = Field(default_factory=list)

    def keys(self) -> list[str]:
        return [field.key for field in self.fields]

    def get(self, key: str) -> Optional[ResolvedField]:
        for field in self.fields:
            if field.key == key:
                return field
        return None


class UploadFormField(FrozenSchema):
    field_id: int
    key: str
    display_label: str
    type: str
    display_widget: Optional[str] = None
    is_required: bool = False
    can_edit: bool = True
    options: list[ResolvedOption] = Field(default_factory=list)


class UploadFieldGroup(FrozenSchema):
    key: str
    label: str
    fields: list[UploadFormField] = Field(default_factory=list)


class UploadSchema(FrozenSchema):
    groups: list[UploadFieldGroup] = Field(default_factory=list)


class FilterOperator(FrozenSchema):
    value: str
    label: str


class FilterableField(FrozenSchema):
    field_id: int
    field_key: str
    display_label: str
    type: str
    operators: list[FilterOperator] = Field(default_factory=list)
    options: list[ResolvedOption] = Field(default_factory=list)
    group_key: Optional[str] = None
    display_widget: Optional[str] = None
    # None means every asset type
    asset_types: Optional[list[str]] = None
    is_primary: bool = False
    filter_type: Optional[str] = None
