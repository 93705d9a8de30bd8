from .filter_schema import FilterSchemaResolver
from .permission_resolver import MetadataPermissionResolver
from .schema_resolver import MetadataSchemaResolver
from .upload_schema import UploadSchemaResolver

__all__ = [
    "FilterSchemaResolver",
    "MetadataPermissionResolver",
    "MetadataSchemaResolver",
    "UploadSchemaResolver",
]
