from typing import Iterable

from opentelemetry import trace
from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from schema_engine.logging import get_logger
from schema_engine.models import MetadataField
from schema_engine.models.enums import AppliesTo, FieldScope
from schema_engine.repositories.base import ReadOnlyRepository
from schema_engine.schemas import FieldDefinition

logger = get_logger(__name__)


class FieldCatalogRepository(ReadOnlyRepository[MetadataField]):
    """Field definitions visible to a tenant"""

    def __init__(self, db: AsyncSession):
        super().__init__(MetadataField, db)
        self.tracer = trace.get_tracer(__name__)

    async def load_applicable_fields(self, asset_type: str, tenant_id: int) -> list[FieldDefinition]:
        """System fields plus the tenant's own fields that apply to ``asset_type``, by ascending id."""
        with self.tracer.start_as_current_span("field_catalog.load_applicable_fields") as span:
            span.set_attribute("catalog.tenant_id", tenant_id)
            span.set_attribute("catalog.asset_type", asset_type)

            rows = await self.get_many(
                filters=[
                    MetadataField.applies_to.in_([AppliesTo(asset_type), AppliesTo.ALL]),
                    MetadataField.is_active.is_(True),
                    MetadataField.archived_at.is_(None),
                    MetadataField.deprecated_at.is_(None),
                    or_(
                        and_(MetadataField.scope == FieldScope.SYSTEM, MetadataField.tenant_id.is_(None)),
                        and_(MetadataField.scope == FieldScope.TENANT, MetadataField.tenant_id == tenant_id),
                    ),
                ],
                order_by=[MetadataField.id],
            )
            fields = [FieldDefinition.model_validate(row) for row in rows]

            logger.debug(
                "field_catalog_fields_loaded",
                tenant_id=tenant_id,
                asset_type=asset_type,
                field_count=len(fields),
            )
            span.set_attribute("catalog.field_count", len(fields))
            return fields

    async def load_fields_by_id(self, field_ids: Iterable[int]) -> dict[int, FieldDefinition]:
        ids = sorted(set(field_ids))
        if not ids:
            return {}

        with self.tracer.start_as_current_span("field_catalog.load_fields_by_id") as span:
            span.set_attribute("catalog.requested_count", len(ids))
            rows = await self.get_many(filters=[MetadataField.id.in_(ids)], order_by=[MetadataField.id])
            return {row.id: FieldDefinition.model_validate(row) for row in rows}
