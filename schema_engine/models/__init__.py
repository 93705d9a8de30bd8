from schema_engine.models.enums import AppliesTo, AssetType, FieldScope, FieldType, PopulationMode
from schema_engine.models.metadata_field import MetadataField, MetadataOption
from schema_engine.models.overrides import MetadataFieldPermission, MetadataFieldVisibility, MetadataOptionVisibility

__all__ = [
    "MetadataField",
    "MetadataOption",
    "MetadataFieldVisibility",
    "MetadataOptionVisibility",
    "MetadataFieldPermission",
    "AppliesTo",
    "AssetType",
    "FieldScope",
    "FieldType",
    "PopulationMode",
]
