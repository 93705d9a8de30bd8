"""Records returned by the read stores.

These are the shapes the resolvers reason about. The SQLAlchemy
repositories build them from ORM rows; any other store only has to return
the same shapes.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from schema_engine.models.enums import AppliesTo, FieldScope, FieldType, PopulationMode
from schema_engine.schemas.base import BaseSchema


class FieldDefinition(BaseSchema):
    """A metadata field as stored, before any override is applied."""

    id: int
    key: str
    system_label: str
    type: FieldType
    scope: FieldScope = FieldScope.SYSTEM
    tenant_id: Optional[int] = None
    applies_to: AppliesTo = AppliesTo.ALL
    is_filterable: bool = True
    is_user_editable: bool = True
    is_ai_trainable: bool = False
    is_upload_visible: bool = True
    is_internal_only: bool = False
    readonly: bool = False
    population_mode: PopulationMode = PopulationMode.MANUAL
    show_on_upload: bool = True
    show_on_edit: bool = True
    show_in_filters: bool = True
    group_key: Optional[str] = None
    display_widget: Optional[str] = None
    is_primary: bool = False

    @property
    def has_options(self) -> bool:
        return self.type in (FieldType.SELECT.value, FieldType.MULTISELECT.value)

    @property
    def is_system_locked(self) -> bool:
        """Populated only by automation and read-only: never user-editable."""
        return self.population_mode == PopulationMode.AUTOMATIC.value and self.readonly


class OptionDefinition(BaseSchema):
    id: int
    metadata_field_id: int
    value: str
    system_label: str
    color: Optional[str] = None
    icon: Optional[str] = None
    is_system: bool = False


class ScopedRow(BaseSchema):
    """Common tenant/brand/category scoping of every override row."""

    tenant_id: int
    brand_id: Optional[int] = None
    category_id: Optional[int] = None


class VisibilityOverride(ScopedRow):
    metadata_field_id: int
    is_hidden: Optional[bool] = Field(default=None, description="Category suppression")
    is_upload_hidden: Optional[bool] = None
    is_edit_hidden: Optional[bool] = None
    is_filter_hidden: Optional[bool] = None
    is_primary: Optional[bool] = None
    is_required: Optional[bool] = None


class OptionVisibilityOverride(ScopedRow):
    metadata_option_id: int
    is_hidden: bool = False


class PermissionOverride(ScopedRow):
    metadata_field_id: int
    role: str
    can_edit: bool = False
