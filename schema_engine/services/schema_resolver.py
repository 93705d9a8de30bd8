"""Effective metadata schema for a (tenant, brand, category, asset type) context.

Field definitions are layered with tenant, brand and category visibility
rows (see ``schema_engine.cascade``). Results are cached forever per context
and built under a named lock so concurrent misses compute once.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable, Optional, Sequence

from opentelemetry import trace

from schema_engine.cache import Cache, CacheManager, schema_cache_key, schema_lock_key
from schema_engine.cascade import ScopeLevel, merge_flags, select_applicable
from schema_engine.config import settings
from schema_engine.exceptions import CacheError, ConfigurationError, InvalidArgumentError
from schema_engine.logging import get_logger
from schema_engine.models.enums import AssetType
from schema_engine.repositories.contracts import FieldCatalog, OptionCatalog, VisibilityOverrideStore
from schema_engine.schemas import (
    FieldDefinition,
    OptionDefinition,
    ResolvedField,
    ResolvedOption,
    ResolvedSchema,
    VisibilityOverride,
)

logger = get_logger(__name__)
tracer = trace.get_tracer(__name__)

# Flags any scope level may set
SURFACE_FLAGS = ("is_upload_hidden", "is_edit_hidden", "is_filter_hidden")
# Flags only category rows may set
CATEGORY_FLAGS = ("is_hidden", "is_primary", "is_required")


def normalize_context(
    tenant_id: Optional[int], brand_id: Optional[int], category_id: Optional[int], asset_type: Any
) -> str:
    """Validate a resolution context and return the asset type as a plain string."""
    if tenant_id is None:
        raise InvalidArgumentError("tenant_id is required", field="tenant_id")

    value = getattr(asset_type, "value", asset_type)
    if not isinstance(value, str) or not AssetType.is_valid(value):
        raise InvalidArgumentError(
            AssetType.get_invalid_value_error_message(value), field="asset_type", value=value
        )

    if category_id is not None and brand_id is None:
        raise InvalidArgumentError(
            "category_id requires brand_id",
            field="category_id",
            value=category_id,
        )
    return value


class MetadataSchemaResolver:
    """Resolves and caches the effective field list for a context.

    Collaborators are the read stores and a ``CacheManager``; the global
    ``Cache`` is used when none is given.
    """

    def __init__(
        self,
        field_catalog: FieldCatalog,
        option_catalog: OptionCatalog,
        visibility_store: VisibilityOverrideStore,
        cache: Optional[CacheManager] = None,
        lock_timeout: Optional[float] = None,
        lock_lease: Optional[float] = None,
        filter_only_keys: Optional[Iterable[str]] = None,
    ) -> None:
        self.field_catalog = field_catalog
        self.option_catalog = option_catalog
        self.visibility_store = visibility_store
        self.cache = cache if cache is not None else Cache
        self.lock_timeout = lock_timeout if lock_timeout is not None else settings.SCHEMA_LOCK_TIMEOUT_SECONDS
        self.lock_lease = lock_lease if lock_lease is not None else settings.SCHEMA_LOCK_LEASE_SECONDS
        self.filter_only_keys = frozenset(
            filter_only_keys if filter_only_keys is not None else settings.FILTER_ONLY_FIELD_KEYS
        )

    async def resolve(
        self,
        tenant_id: int,
        brand_id: Optional[int],
        category_id: Optional[int],
        asset_type: str,
    ) -> ResolvedSchema:
        """Cached resolution.

        Raises:
            InvalidArgumentError: unusable context
            LockTimeoutError: the build lock was not acquired in time

        """
        asset_type = normalize_context(tenant_id, brand_id, category_id, asset_type)
        if self.cache.backend is None:
            raise ConfigurationError("Cache backend not initialized", config_key="CACHE_ENABLED")

        cache_key = schema_cache_key(tenant_id, brand_id, category_id, asset_type)

        with tracer.start_as_current_span("schema_resolver.resolve") as span:
            span.set_attribute("schema.tenant_id", tenant_id)
            span.set_attribute("schema.asset_type", asset_type)
            span.set_attribute("schema.cache_key", cache_key)

            cached = await self._read_cache(cache_key)
            if cached is not None:
                logger.debug("schema_cache_hit", cache_key=cache_key)
                span.set_attribute("schema.cache_hit", True)
                return ResolvedSchema.model_validate(cached)

            logger.debug("schema_cache_miss", cache_key=cache_key)
            span.set_attribute("schema.cache_hit", False)

            lock_key = schema_lock_key(cache_key)
            try:
                async with self.cache.lock(lock_key, timeout=self.lock_timeout, lease=self.lock_lease):
                    cached = await self._read_cache(cache_key)
                    if cached is not None:
                        logger.debug("schema_cache_filled_while_waiting", cache_key=cache_key)
                        return ResolvedSchema.model_validate(cached)

                    schema = await self.resolve_uncached(tenant_id, brand_id, category_id, asset_type)
                    await self._write_cache(cache_key, schema)
                    return schema
            except CacheError as e:
                # Lock backend unreachable
                logger.warning("schema_build_lock_unavailable", lock_key=lock_key, error=str(e))
                return await self.resolve_uncached(tenant_id, brand_id, category_id, asset_type)

    async def resolve_uncached(
        self,
        tenant_id: int,
        brand_id: Optional[int],
        category_id: Optional[int],
        asset_type: str,
    ) -> ResolvedSchema:
        """Build the schema straight from the stores, bypassing cache and lock."""
        asset_type = normalize_context(tenant_id, brand_id, category_id, asset_type)

        with tracer.start_as_current_span("schema_resolver.resolve_uncached") as span:
            fields = await self.field_catalog.load_applicable_fields(asset_type, tenant_id)
            if not fields:
                logger.info("schema_no_applicable_fields", tenant_id=tenant_id, asset_type=asset_type)
                return ResolvedSchema(fields=[])

            field_ids = [field.id for field in fields]
            overrides = await self.visibility_store.load_visibility_overrides(
                tenant_id, brand_id, category_id, field_ids
            )
            overrides_by_field: dict[int, list[VisibilityOverride]] = defaultdict(list)
            for row in select_applicable(overrides, tenant_id, brand_id, category_id):
                overrides_by_field[row.metadata_field_id].append(row)

            option_field_ids = [field.id for field in fields if field.has_options]
            options: dict[int, list[OptionDefinition]] = {}
            hidden_options: dict[int, bool] = {}
            if option_field_ids:
                options = await self.option_catalog.load_options(option_field_ids)
                hidden_options = await self.visibility_store.load_option_visibility_overrides(
                    tenant_id, brand_id, category_id
                )

            resolved = []
            for field in sorted(fields, key=lambda f: f.id):
                resolved_field = self.resolve_field(
                    field,
                    overrides_by_field.get(field.id, []),
                    options.get(field.id, []),
                    hidden_options,
                )
                if resolved_field.is_visible:
                    resolved.append(resolved_field)

            logger.info(
                "schema_resolved",
                tenant_id=tenant_id,
                brand_id=brand_id,
                category_id=category_id,
                asset_type=asset_type,
                applicable_count=len(fields),
                visible_count=len(resolved),
            )
            span.set_attribute("schema.field_count", len(resolved))
            return ResolvedSchema(fields=resolved)

    def resolve_field(
        self,
        field: FieldDefinition,
        overrides: Sequence[VisibilityOverride],
        options: Sequence[OptionDefinition],
        hidden_options: dict[int, bool],
    ) -> ResolvedField:
        """Apply ``overrides`` (most specific first) to one field definition."""
        surface = merge_flags(overrides, SURFACE_FLAGS)
        category = merge_flags(overrides, CATEGORY_FLAGS, levels=[ScopeLevel.CATEGORY])

        is_hidden = bool(category["is_hidden"])
        is_upload_hidden = _first_set(surface["is_upload_hidden"], not field.is_upload_visible)
        is_edit_hidden = _first_set(surface["is_edit_hidden"], not field.show_on_edit)
        is_filter_hidden = _first_set(surface["is_filter_hidden"], not field.is_filterable)
        is_primary = _first_set(category["is_primary"], field.is_primary)

        if field.key in self.filter_only_keys:
            is_edit_hidden = True
            is_upload_hidden = True
            is_primary = False

        resolved_options = []
        if field.has_options:
            visible = [option for option in options if not hidden_options.get(option.id, False)]
            resolved_options = [
                ResolvedOption(
                    option_id=option.id,
                    value=option.value,
                    display_label=option.system_label,
                    color=option.color,
                    icon=option.icon,
                )
                for option in sorted(visible, key=lambda o: (o.system_label, o.id))
            ]

        return ResolvedField(
            field_id=field.id,
            key=field.key,
            display_label=field.system_label,
            type=field.type,
            group_key=field.group_key,
            applies_to=field.applies_to,
            display_widget=field.display_widget,
            is_visible=not is_hidden,
            is_upload_visible=not is_upload_hidden,
            is_filterable=not is_filter_hidden,
            is_internal_only=field.is_internal_only,
            population_mode=field.population_mode,
            show_on_upload=field.show_on_upload,
            show_on_edit=not is_edit_hidden,
            show_in_filters=field.show_in_filters,
            readonly=field.readonly,
            is_primary=is_primary,
            is_required=bool(category["is_required"]),
            options=resolved_options,
        )

    async def _read_cache(self, cache_key: str) -> Optional[dict]:
        try:
            return await self.cache.get(cache_key)
        except CacheError:
            # Already logged by the cache manager; treat as a miss.
            return None

    async def _write_cache(self, cache_key: str, schema: ResolvedSchema) -> None:
        try:
            await self.cache.put_forever(cache_key, schema.model_dump(mode="json"))
        except CacheError:
            logger.warning("schema_cache_store_skipped", cache_key=cache_key)


def _first_set(value: Optional[bool], default: bool) -> bool:
    return default if value is None else value
