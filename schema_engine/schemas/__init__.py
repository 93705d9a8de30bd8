from schema_engine.schemas.definitions import (
    FieldDefinition,
    OptionDefinition,
    OptionVisibilityOverride,
    PermissionOverride,
    VisibilityOverride,
)
from schema_engine.schemas.resolved import (
    FilterableField,
    FilterOperator,
    ResolvedField,
    ResolvedOption,
    ResolvedSchema,
    UploadFieldGroup,
    UploadFormField,
    UploadSchema,
)

__all__ = [
    "FieldDefinition",
    "OptionDefinition",
    "OptionVisibilityOverride",
    "PermissionOverride",
    "VisibilityOverride",
    "FilterableField",
    "FilterOperator",
    "ResolvedField",
    "ResolvedOption",
    "ResolvedSchema",
    "UploadFieldGroup",
    "UploadFormField",
    "UploadSchema",
]
