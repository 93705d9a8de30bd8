from typing import Optional

from schema_engine.config import settings

LOCK_KEY_PREFIX = "metadata_schema_build"


def _part(value: Optional[int]) -> str:
    return "none" if value is None else str(value)


def tenant_cache_prefix(tenant_id: int, prefix: Optional[str] = None) -> str:
    """Namespace holding every cached schema of one tenant."""
    return f"{prefix or settings.CACHE_KEY_PREFIX}::tenant:{tenant_id}"


def schema_cache_key(
    tenant_id: int,
    brand_id: Optional[int],
    category_id: Optional[int],
    asset_type: str,
    prefix: Optional[str] = None,
) -> str:
    return (
        f"{tenant_cache_prefix(tenant_id, prefix)}::brand:{_part(brand_id)}"
        f":category:{_part(category_id)}:asset_type:{asset_type}"
    )


def schema_lock_key(cache_key: str) -> str:
    return f"{LOCK_KEY_PREFIX}:{cache_key}"
