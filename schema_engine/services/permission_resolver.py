from typing import Iterable, Optional

from opentelemetry import trace

from schema_engine.config import settings
from schema_engine.exceptions import InvalidArgumentError
from schema_engine.logging import get_logger
from schema_engine.repositories.contracts import FieldCatalog, PermissionOverrideStore

logger = get_logger(__name__)
tracer = trace.get_tracer(__name__)


class MetadataPermissionResolver:
    """Per-role edit permission for metadata fields.

    Elevated roles may edit everything that is not system-locked. Every other
    role needs a permission row; the most specific one (category, then brand,
    then tenant) decides and no row means no access.
    """

    def __init__(
        self,
        permission_store: PermissionOverrideStore,
        field_catalog: FieldCatalog,
        elevated_roles: Optional[Iterable[str]] = None,
    ) -> None:
        self.permission_store = permission_store
        self.field_catalog = field_catalog
        roles = elevated_roles if elevated_roles is not None else settings.ELEVATED_ROLES
        self.elevated_roles = frozenset(role.strip().lower() for role in roles)

    async def can_edit(
        self,
        field_id: int,
        role: str,
        tenant_id: int,
        brand_id: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> bool:
        permissions = await self.can_edit_multiple([field_id], role, tenant_id, brand_id, category_id)
        return permissions.get(field_id, False)

    async def can_edit_multiple(
        self,
        field_ids: Iterable[int],
        role: str,
        tenant_id: int,
        brand_id: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> dict[int, bool]:
        """Edit permission for every requested field id.

        Unknown field ids map to False.

        Raises:
            InvalidArgumentError: empty role, missing tenant, or category without brand

        """
        if not role or not role.strip():
            raise InvalidArgumentError("role is required", field="role")
        if tenant_id is None:
            raise InvalidArgumentError("tenant_id is required", field="tenant_id")
        if category_id is not None and brand_id is None:
            raise InvalidArgumentError("category_id requires brand_id", field="category_id", value=category_id)

        ids = list(dict.fromkeys(field_ids))
        if not ids:
            return {}

        normalized_role = role.strip().lower()

        with tracer.start_as_current_span("permission_resolver.can_edit_multiple") as span:
            span.set_attribute("permission.role", normalized_role)
            span.set_attribute("permission.field_count", len(ids))

            fields = await self.field_catalog.load_fields_by_id(ids)
            editable_candidates = [
                field_id for field_id in ids if field_id in fields and not fields[field_id].is_system_locked
            ]

            result = {field_id: False for field_id in ids}
            if normalized_role in self.elevated_roles:
                for field_id in editable_candidates:
                    result[field_id] = True
            elif editable_candidates:
                overrides = await self.permission_store.load_permission_overrides(
                    editable_candidates, normalized_role, tenant_id, brand_id, category_id
                )
                for field_id in editable_candidates:
                    result[field_id] = overrides.get(field_id, False)

            logger.debug(
                "field_permissions_resolved",
                role=normalized_role,
                tenant_id=tenant_id,
                brand_id=brand_id,
                category_id=category_id,
                field_count=len(ids),
                editable_count=sum(result.values()),
            )
            return result
