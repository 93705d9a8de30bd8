from typing import Iterable, Optional

from opentelemetry import trace
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from schema_engine.cascade import select_applicable
from schema_engine.logging import get_logger
from schema_engine.models import MetadataFieldPermission
from schema_engine.repositories.base import ReadOnlyRepository, brand_scope_condition
from schema_engine.schemas import PermissionOverride

logger = get_logger(__name__)


class PermissionOverrideRepository(ReadOnlyRepository[MetadataFieldPermission]):
    def __init__(self, db: AsyncSession):
        super().__init__(MetadataFieldPermission, db)
        self.tracer = trace.get_tracer(__name__)

    async def load_permission_overrides(
        self,
        field_ids: Iterable[int],
        role: str,
        tenant_id: int,
        brand_id: Optional[int],
        category_id: Optional[int],
    ) -> dict[int, bool]:
        """Field id to ``can_edit`` from the most specific row for ``role``.

        Roles compare case-insensitively. Fields without a row are left out.
        """
        ids = sorted(set(field_ids))
        if not ids:
            return {}

        with self.tracer.start_as_current_span("permission_store.load_permission_overrides") as span:
            span.set_attribute("permission.tenant_id", tenant_id)
            span.set_attribute("permission.role", role)

            filters = [
                MetadataFieldPermission.tenant_id == tenant_id,
                MetadataFieldPermission.metadata_field_id.in_(ids),
                func.lower(MetadataFieldPermission.role) == role.lower(),
                brand_scope_condition(MetadataFieldPermission, brand_id),
            ]

            rows = await self.get_many(filters=filters, order_by=[MetadataFieldPermission.id])
            overrides = select_applicable(
                [PermissionOverride.model_validate(row) for row in rows], tenant_id, brand_id, category_id
            )

            permissions: dict[int, bool] = {}
            for override in overrides:
                permissions.setdefault(override.metadata_field_id, override.can_edit)

            logger.debug(
                "permission_overrides_loaded",
                tenant_id=tenant_id,
                role=role,
                field_count=len(ids),
                matched_count=len(permissions),
            )
            return permissions
