from collections import defaultdict
from typing import Optional

from schema_engine.logging import get_logger
from schema_engine.models.enums import FieldType, PopulationMode
from schema_engine.observability import trace_async_function
from schema_engine.repositories.contracts import FieldCatalog
from schema_engine.schemas import ResolvedField, UploadFieldGroup, UploadFormField, UploadSchema
from schema_engine.services.permission_resolver import MetadataPermissionResolver
from schema_engine.services.schema_resolver import MetadataSchemaResolver

logger = get_logger(__name__)

DEFAULT_GROUP_KEY = "general"

GROUP_LABELS = {
    "general": "General",
    "creative": "Creative",
    "technical": "Technical",
    "commercial": "Commercial",
    "legal": "Legal / Rights",
    "legal_rights": "Legal / Rights",
    "ai": "AI / System",
    "ai_system": "AI / System",
}


def group_label(group_key: str) -> str:
    label = GROUP_LABELS.get(group_key.lower())
    if label:
        return label
    words = group_key.replace("_", " ").replace("-", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def is_upload_field(field: ResolvedField) -> bool:
    """Whether a user fills this field in on the upload form."""
    return (
        field.is_visible
        and field.is_upload_visible
        and field.type != FieldType.RATING.value
        and not field.is_internal_only
        and field.population_mode != PopulationMode.AUTOMATIC.value
        and field.show_on_upload
    )


class UploadSchemaResolver:
    """Upload form view of the resolved schema, grouped for display"""

    def __init__(
        self,
        schema_resolver: MetadataSchemaResolver,
        permission_resolver: MetadataPermissionResolver,
        field_catalog: FieldCatalog,
    ) -> None:
        self.schema_resolver = schema_resolver
        self.permission_resolver = permission_resolver
        self.field_catalog = field_catalog

    @trace_async_function("upload_schema.resolve")
    async def resolve(
        self,
        tenant_id: int,
        brand_id: Optional[int],
        category_id: Optional[int],
        asset_type: str,
        role: Optional[str] = None,
    ) -> UploadSchema:
        schema = await self.schema_resolver.resolve(tenant_id, brand_id, category_id, asset_type)
        fields = [field for field in schema.fields if is_upload_field(field)]

        can_edit = await self._can_edit(fields, role, tenant_id, brand_id, category_id)

        grouped: dict[str, list[UploadFormField]] = defaultdict(list)
        for field in fields:
            grouped[field.group_key or DEFAULT_GROUP_KEY].append(
                UploadFormField(
                    field_id=field.field_id,
                    key=field.key,
                    display_label=field.display_label,
                    type=field.type,
                    display_widget=field.display_widget,
                    is_required=field.is_required,
                    can_edit=can_edit.get(field.field_id, True),
                    options=field.options,
                )
            )

        groups = [
            UploadFieldGroup(key=key, label=group_label(key), fields=grouped[key]) for key in sorted(grouped)
        ]

        logger.debug(
            "upload_schema_resolved",
            tenant_id=tenant_id,
            category_id=category_id,
            asset_type=asset_type,
            field_count=len(fields),
            group_count=len(groups),
            with_permissions=role is not None,
        )
        return UploadSchema(groups=groups)

    async def _can_edit(
        self,
        fields: list[ResolvedField],
        role: Optional[str],
        tenant_id: int,
        brand_id: Optional[int],
        category_id: Optional[int],
    ) -> dict[int, bool]:
        """``can_edit`` per field id; empty when no role is given (everything editable)."""
        if role is None or not fields:
            return {}

        field_ids = [field.field_id for field in fields]
        permissions = await self.permission_resolver.can_edit_multiple(
            field_ids, role, tenant_id, brand_id, category_id
        )
        definitions = await self.field_catalog.load_fields_by_id(field_ids)

        can_edit = {}
        for field in fields:
            definition = definitions.get(field.field_id)
            is_user_editable = definition.is_user_editable if definition is not None else False
            can_edit[field.field_id] = (
                permissions.get(field.field_id, False) and is_user_editable and not field.is_system_locked
            )
        return can_edit
