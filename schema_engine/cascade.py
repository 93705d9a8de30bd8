"""Layered override precedence shared by the visibility and permission resolvers.

Every override row is scoped to exactly one of three shapes:

* tenant   - brand and category both null
* brand    - brand set, category null
* category - brand and category both set

More specific shapes win over less specific ones, flag by flag: a flag left
null on a category row falls through to the brand row, then the tenant row,
then the caller's default.
"""

from __future__ import annotations

import enum
from typing import Iterable, Optional, Sequence, TypeVar

from schema_engine.logging import get_logger

logger = get_logger(__name__)

RowT = TypeVar("RowT")


class ScopeLevel(enum.IntEnum):
    TENANT = 1
    BRAND = 2
    CATEGORY = 3


def scope_level(row) -> Optional[ScopeLevel]:
    """Scope shape of a row, or None when the row is malformed (category without brand)."""
    if row.category_id is not None:
        if row.brand_id is None:
            return None
        return ScopeLevel.CATEGORY
    if row.brand_id is not None:
        return ScopeLevel.BRAND
    return ScopeLevel.TENANT


def applies_to_context(row, tenant_id: int, brand_id: Optional[int], category_id: Optional[int]) -> bool:
    """Whether a row participates in resolution for the given context."""
    if row.tenant_id != tenant_id:
        return False

    level = scope_level(row)
    if level is None:
        logger.warning(
            "override_row_malformed_scope",
            row_type=type(row).__name__,
            tenant_id=row.tenant_id,
            category_id=row.category_id,
        )
        return False
    if level is ScopeLevel.TENANT:
        return True
    if level is ScopeLevel.BRAND:
        return brand_id is not None and row.brand_id == brand_id
    return brand_id is not None and category_id is not None and row.brand_id == brand_id and row.category_id == category_id


def select_applicable(
    rows: Iterable[RowT], tenant_id: int, brand_id: Optional[int], category_id: Optional[int]
) -> list[RowT]:
    """Keep the rows that apply to the context, most specific first.

    The sort is stable, so rows of equal specificity keep the store's order.
    """
    applicable = [row for row in rows if applies_to_context(row, tenant_id, brand_id, category_id)]
    return sorted(applicable, key=lambda row: scope_level(row), reverse=True)


def merge_flags(rows: Sequence, flags: Sequence[str], levels: Optional[Iterable[ScopeLevel]] = None) -> dict[str, Optional[bool]]:
    """Most specific non-null value per flag.

    ``rows`` must already be ordered most specific first (see
    ``select_applicable``). ``levels`` restricts which scope shapes may set
    the flags; flags no eligible row sets come back as None.
    """
    allowed = set(levels) if levels is not None else None
    merged: dict[str, Optional[bool]] = {flag: None for flag in flags}

    for row in rows:
        if allowed is not None and scope_level(row) not in allowed:
            continue
        for flag in flags:
            if merged[flag] is None:
                value = getattr(row, flag, None)
                if value is not None:
                    merged[flag] = bool(value)

    return merged

