from typing import Iterable, Optional

from schema_engine.config import settings
from schema_engine.logging import get_logger
from schema_engine.models.enums import AppliesTo, FieldType, PopulationMode
from schema_engine.observability import trace_async_function
from schema_engine.schemas import FilterableField, FilterOperator, ResolvedField
from schema_engine.services.schema_resolver import MetadataSchemaResolver

logger = get_logger(__name__)

# Pinned to the top of the filter panel, in this order
FILTER_ORDER_PRIORITY = {"tags": 0, "collection": 1}

OPERATORS_BY_TYPE: dict[str, list[tuple[str, str]]] = {
    FieldType.TEXT.value: [("contains", "Contains"), ("equals", "Equals")],
    FieldType.NUMBER.value: [
        ("equals", "Equals"),
        ("greater_than", "Greater than"),
        ("less_than", "Less than"),
        ("range", "Range"),
    ],
    FieldType.BOOLEAN.value: [("equals", "Is")],
    FieldType.SELECT.value: [("equals", "Is")],
    FieldType.MULTISELECT.value: [("contains_any", "Contains any"), ("contains_all", "Contains all")],
    FieldType.DATE.value: [("equals", "Is"), ("before", "Before"), ("after", "After"), ("range", "Range")],
}
DEFAULT_OPERATORS = [("equals", "Equals")]


def operators_for_type(field_type: str) -> list[FilterOperator]:
    pairs = OPERATORS_BY_TYPE.get(field_type, DEFAULT_OPERATORS)
    return [FilterOperator(value=value, label=label) for value, label in pairs]


def is_system_automated_filter(field: ResolvedField) -> bool:
    return field.population_mode == PopulationMode.AUTOMATIC.value and field.show_in_filters


class FilterSchemaResolver:
    """Filter panel view of the resolved schema"""

    def __init__(
        self,
        schema_resolver: MetadataSchemaResolver,
        always_hidden_keys: Optional[Iterable[str]] = None,
    ) -> None:
        self.schema_resolver = schema_resolver
        self.always_hidden_keys = frozenset(
            always_hidden_keys if always_hidden_keys is not None else settings.FILTER_ALWAYS_HIDDEN_FIELD_KEYS
        )

    def is_filter_field(self, field: ResolvedField) -> bool:
        if field.key in self.always_hidden_keys:
            return False
        if not field.is_filterable or not field.show_in_filters:
            return False
        if field.is_internal_only and not is_system_automated_filter(field):
            return False
        return True

    @trace_async_function("filter_schema.resolve")
    async def resolve(
        self,
        tenant_id: int,
        brand_id: Optional[int],
        category_id: Optional[int],
        asset_type: str,
    ) -> list[FilterableField]:
        schema = await self.schema_resolver.resolve(tenant_id, brand_id, category_id, asset_type)

        filterable = [self._to_filterable(field) for field in schema.fields if self.is_filter_field(field)]
        # sorted() is stable, so the rest keep schema order
        filterable = sorted(filterable, key=lambda entry: FILTER_ORDER_PRIORITY.get(entry.field_key, 2))

        logger.debug(
            "filter_schema_resolved",
            tenant_id=tenant_id,
            category_id=category_id,
            asset_type=asset_type,
            field_count=len(filterable),
        )
        return filterable

    def _to_filterable(self, field: ResolvedField) -> FilterableField:
        display_widget = field.display_widget
        if display_widget is None and field.key == "starred":
            display_widget = "toggle"

        return FilterableField(
            field_id=field.field_id,
            field_key=field.key,
            display_label=field.display_label,
            type=field.type,
            operators=operators_for_type(field.type),
            options=field.options,
            group_key=field.group_key,
            display_widget=display_widget,
            asset_types=None if field.applies_to == AppliesTo.ALL.value else [field.applies_to],
            is_primary=field.is_primary,
            filter_type="color" if field.key == "dominant_color_bucket" else None,
        )
