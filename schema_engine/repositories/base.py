from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, TypeVar

from opentelemetry import trace
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql.elements import ColumnElement

from schema_engine.logging import get_logger

logger = get_logger(__name__)
tracer = trace.get_tracer(__name__)

ModelType = TypeVar("ModelType", bound=DeclarativeBase)


def brand_scope_condition(model, brand_id: Optional[int]) -> ColumnElement[bool]:
    """Rows that can apply under `brand_id`: tenant rows always, brand and category rows only for that brand."""
    if brand_id is None:
        return model.brand_id.is_(None)
    return or_(model.brand_id.is_(None), model.brand_id == brand_id)


class ReadOnlyRepository(Generic[ModelType]):
    """Base repository providing traced read operations.

    The engine never writes domain data, so only reads are exposed.
    """

    def __init__(self, model: type[ModelType], session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            model: The SQLAlchemy model class
            session: The database session

        """
        self.model = model
        self.session = session
        self.model_name = model.__name__

    async def get_many(
        self,
        filters: Optional[Sequence[ColumnElement[bool]]] = None,
        order_by: Optional[Sequence[Any]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[ModelType]:
        """Get records matching all ``filters``.

        Args:
            filters: SQLAlchemy boolean expressions, ANDed together
            order_by: Columns or expressions to order by
            skip: Number of records to skip
            limit: Maximum number of records; None returns all

        Returns:
            list[ModelType]: Matching records

        """
        with tracer.start_as_current_span("repository_get_many") as span:
            span.set_attribute("repository.model", self.model_name)
            span.set_attribute("repository.operation", "get_many")
            span.set_attribute("repository.skip", skip)

            try:
                stmt = select(self.model)
                if filters:
                    stmt = stmt.where(*filters)
                    span.set_attribute("repository.filters_count", len(filters))
                if order_by:
                    stmt = stmt.order_by(*order_by)
                if skip:
                    stmt = stmt.offset(skip)
                if limit is not None:
                    stmt = stmt.limit(limit)

                result = await self.session.execute(stmt)
                records = list(result.scalars().all())

                logger.debug("repository_records_retrieved", model=self.model_name, count=len(records))
                span.set_attribute("repository.records_count", len(records))
                return records

            except Exception as e:
                logger.error(
                    "repository_get_many_failed",
                    model=self.model_name,
                    error=str(e),
                    exc_info=True,
                )
                span.set_attribute("repository.success", False)
                span.record_exception(e)
                raise
