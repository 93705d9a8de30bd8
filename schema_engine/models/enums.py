import enum


class AssetType(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"

    @classmethod
    def values(cls) -> list[str]:
        """Get all enum values as a list"""
        return [item.value for item in cls]

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check if a value is a valid AssetType"""
        return value in cls.values()

    @classmethod
    def get_invalid_value_error_message(cls, invalid_value: str) -> str:
        """Get formatted error message for an invalid asset type"""
        return f"Invalid asset_type: '{invalid_value}'. Supported values: {cls.values()}"


class AppliesTo(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    ALL = "all"


class FieldType(str, enum.Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    MULTISELECT = "multiselect"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    RATING = "rating"

    @property
    def has_options(self) -> bool:
        return self in (FieldType.SELECT, FieldType.MULTISELECT)


class FieldScope(str, enum.Enum):
    SYSTEM = "system"
    TENANT = "tenant"


class PopulationMode(str, enum.Enum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"
