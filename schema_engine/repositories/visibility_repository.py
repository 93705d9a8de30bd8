from typing import Iterable, Optional

from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from schema_engine.cascade import select_applicable
from schema_engine.logging import get_logger
from schema_engine.models import MetadataFieldVisibility, MetadataOptionVisibility
from schema_engine.repositories.base import ReadOnlyRepository, brand_scope_condition
from schema_engine.schemas import OptionVisibilityOverride, VisibilityOverride

logger = get_logger(__name__)


class VisibilityOverrideRepository(ReadOnlyRepository[MetadataFieldVisibility]):
    """Layered field and option visibility rows for one context"""

    def __init__(self, db: AsyncSession):
        super().__init__(MetadataFieldVisibility, db)
        self.tracer = trace.get_tracer(__name__)

    async def load_visibility_overrides(
        self,
        tenant_id: int,
        brand_id: Optional[int],
        category_id: Optional[int],
        field_ids: Iterable[int],
    ) -> list[VisibilityOverride]:
        ids = sorted(set(field_ids))
        if not ids:
            return []

        with self.tracer.start_as_current_span("visibility_store.load_visibility_overrides") as span:
            span.set_attribute("visibility.tenant_id", tenant_id)
            span.set_attribute("visibility.field_count", len(ids))

            rows = await self.get_many(
                filters=[
                    MetadataFieldVisibility.tenant_id == tenant_id,
                    MetadataFieldVisibility.metadata_field_id.in_(ids),
                    brand_scope_condition(MetadataFieldVisibility, brand_id),
                ],
                order_by=[MetadataFieldVisibility.id],
            )
            overrides = select_applicable(
                [VisibilityOverride.model_validate(row) for row in rows], tenant_id, brand_id, category_id
            )

            logger.debug(
                "visibility_overrides_loaded",
                tenant_id=tenant_id,
                brand_id=brand_id,
                category_id=category_id,
                row_count=len(overrides),
            )
            span.set_attribute("visibility.row_count", len(overrides))
            return overrides

    async def load_option_visibility_overrides(
        self, tenant_id: int, brand_id: Optional[int], category_id: Optional[int]
    ) -> dict[int, bool]:
        with self.tracer.start_as_current_span("visibility_store.load_option_visibility_overrides"):
            stmt_filters = [
                MetadataOptionVisibility.tenant_id == tenant_id,
                brand_scope_condition(MetadataOptionVisibility, brand_id),
            ]
            rows = await ReadOnlyRepository(MetadataOptionVisibility, self.session).get_many(
                filters=stmt_filters, order_by=[MetadataOptionVisibility.id]
            )
            overrides = select_applicable(
                [OptionVisibilityOverride.model_validate(row) for row in rows], tenant_id, brand_id, category_id
            )

            hidden: dict[int, bool] = {}
            for override in overrides:
                hidden.setdefault(override.metadata_option_id, override.is_hidden)
            return hidden
