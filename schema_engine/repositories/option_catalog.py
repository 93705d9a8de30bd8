from collections import defaultdict
from typing import Iterable

from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from schema_engine.logging import get_logger
from schema_engine.models import MetadataOption
from schema_engine.repositories.base import ReadOnlyRepository
from schema_engine.schemas import OptionDefinition

logger = get_logger(__name__)


class OptionCatalogRepository(ReadOnlyRepository[MetadataOption]):
    def __init__(self, db: AsyncSession):
        super().__init__(MetadataOption, db)
        self.tracer = trace.get_tracer(__name__)

    async def load_options(self, field_ids: Iterable[int]) -> dict[int, list[OptionDefinition]]:
        """Options of every requested field in one query, ordered by label then id."""
        ids = sorted(set(field_ids))
        if not ids:
            return {}

        with self.tracer.start_as_current_span("option_catalog.load_options") as span:
            span.set_attribute("catalog.field_count", len(ids))

            rows = await self.get_many(
                filters=[MetadataOption.metadata_field_id.in_(ids)],
                order_by=[MetadataOption.system_label, MetadataOption.id],
            )

            options: dict[int, list[OptionDefinition]] = defaultdict(list)
            for row in rows:
                options[row.metadata_field_id].append(OptionDefinition.model_validate(row))

            logger.debug("option_catalog_options_loaded", field_count=len(ids), option_count=len(rows))
            return dict(options)
