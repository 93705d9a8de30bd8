"""Read contracts the resolvers depend on.

The SQLAlchemy repositories in this package implement them; any object with
the same async methods can be injected instead.
"""

from typing import Iterable, Optional, Protocol

from schema_engine.schemas import FieldDefinition, OptionDefinition, VisibilityOverride


class FieldCatalog(Protocol):
    async def load_applicable_fields(self, asset_type: str, tenant_id: int) -> list[FieldDefinition]:
        ...

    async def load_fields_by_id(self, field_ids: Iterable[int]) -> dict[int, FieldDefinition]:
        ...


class OptionCatalog(Protocol):
    async def load_options(self, field_ids: Iterable[int]) -> dict[int, list[OptionDefinition]]:
        ...


class VisibilityOverrideStore(Protocol):
    async def load_visibility_overrides(
        self,
        tenant_id: int,
        brand_id: Optional[int],
        category_id: Optional[int],
        field_ids: Iterable[int],
    ) -> list[VisibilityOverride]:
        """Rows applying to the context, most specific first."""
        ...

    async def load_option_visibility_overrides(
        self, tenant_id: int, brand_id: Optional[int], category_id: Optional[int]
    ) -> dict[int, bool]:
        """Option id to hidden flag, most specific row winning."""
        ...


class PermissionOverrideStore(Protocol):
    async def load_permission_overrides(
        self,
        field_ids: Iterable[int],
        role: str,
        tenant_id: int,
        brand_id: Optional[int],
        category_id: Optional[int],
    ) -> dict[int, bool]:
        """Field id to can_edit, most specific row winning. Fields with no row are absent."""
        ...
