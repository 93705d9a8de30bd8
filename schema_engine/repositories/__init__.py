from .base import ReadOnlyRepository
from .contracts import FieldCatalog, OptionCatalog, PermissionOverrideStore, VisibilityOverrideStore
from .field_catalog import FieldCatalogRepository
from .option_catalog import OptionCatalogRepository
from .permission_repository import PermissionOverrideRepository
from .visibility_repository import VisibilityOverrideRepository

__all__ = [
    "FieldCatalog",
    "FieldCatalogRepository",
    "OptionCatalog",
    "OptionCatalogRepository",
    "PermissionOverrideRepository",
    "PermissionOverrideStore",
    "ReadOnlyRepository",
    "VisibilityOverrideRepository",
    "VisibilityOverrideStore",
]
