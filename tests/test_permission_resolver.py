import pytest

from schema_engine.exceptions import InvalidArgumentError
from schema_engine.services import MetadataPermissionResolver
from tests.fakes import (
    BRAND_ID,
    CATEGORY_ID,
    OTHER_BRAND_ID,
    OTHER_CATEGORY_ID,
    OTHER_TENANT_ID,
    TENANT_ID,
    InMemoryFieldCatalog,
    InMemoryPermissionStore,
    make_field,
    permission,
)

EDITABLE = 1
LOCKED = 2
AUTOMATIC_EDITABLE = 3


@pytest.fixture
def fields():
    return [
        make_field(EDITABLE, "photo_type", type="select"),
        make_field(LOCKED, "dominant_color_bucket", population_mode="automatic", readonly=True),
        make_field(AUTOMATIC_EDITABLE, "scene_classification", population_mode="automatic", readonly=False),
    ]


def build(fields, rows=(), elevated_roles=None) -> MetadataPermissionResolver:
    return MetadataPermissionResolver(
        permission_store=InMemoryPermissionStore(rows),
        field_catalog=InMemoryFieldCatalog(fields),
        elevated_roles=elevated_roles,
    )


class TestPermissionResolver:
    """Test per-role edit permissions."""

    async def test_category_row_beats_tenant_row(self, fields):
        """Editor denied tenant-wide but allowed in one category."""
        resolver = build(
            fields,
            rows=[
                permission(EDITABLE, "editor", False),
                permission(EDITABLE, "editor", True, brand_id=BRAND_ID, category_id=CATEGORY_ID),
            ],
        )

        assert await resolver.can_edit(EDITABLE, "editor", TENANT_ID, BRAND_ID, CATEGORY_ID) is True
        assert await resolver.can_edit(EDITABLE, "editor", TENANT_ID, BRAND_ID, OTHER_CATEGORY_ID) is False
        assert await resolver.can_edit(EDITABLE, "editor", TENANT_ID) is False

    async def test_brand_row_beats_tenant_row(self, fields):
        resolver = build(
            fields,
            rows=[
                permission(EDITABLE, "contributor", True),
                permission(EDITABLE, "contributor", False, brand_id=BRAND_ID),
            ],
        )

        assert await resolver.can_edit(EDITABLE, "contributor", TENANT_ID, BRAND_ID) is False
        assert await resolver.can_edit(EDITABLE, "contributor", TENANT_ID, OTHER_BRAND_ID) is True

    async def test_default_deny(self, fields):
        resolver = build(fields, rows=[permission(EDITABLE, "editor", True, tenant_id=OTHER_TENANT_ID)])

        assert await resolver.can_edit(EDITABLE, "editor", TENANT_ID) is False
        assert await resolver.can_edit(EDITABLE, "viewer", TENANT_ID) is False

    async def test_role_compared_case_insensitively(self, fields):
        resolver = build(fields, rows=[permission(EDITABLE, "Editor", True)])

        assert await resolver.can_edit(EDITABLE, "EDITOR", TENANT_ID) is True

    async def test_elevated_roles_allowed_without_rows(self, fields):
        resolver = build(fields)

        assert await resolver.can_edit(EDITABLE, "owner", TENANT_ID) is True
        assert await resolver.can_edit(EDITABLE, "Admin", TENANT_ID, BRAND_ID, CATEGORY_ID) is True
        assert resolver.permission_store.calls == 0

    async def test_elevated_roles_configurable(self, fields):
        resolver = build(fields, elevated_roles=["brand_manager"])

        assert await resolver.can_edit(EDITABLE, "brand_manager", TENANT_ID) is True
        assert await resolver.can_edit(EDITABLE, "admin", TENANT_ID) is False

    async def test_system_locked_field_is_never_editable(self, fields):
        resolver = build(fields, rows=[permission(LOCKED, "editor", True)])

        assert await resolver.can_edit(LOCKED, "owner", TENANT_ID) is False
        assert await resolver.can_edit(LOCKED, "admin", TENANT_ID) is False
        assert await resolver.can_edit(LOCKED, "editor", TENANT_ID) is False

    async def test_automatic_but_writable_field_follows_rows(self, fields):
        resolver = build(fields, rows=[permission(AUTOMATIC_EDITABLE, "editor", True)])

        assert await resolver.can_edit(AUTOMATIC_EDITABLE, "editor", TENANT_ID) is True
        assert await resolver.can_edit(AUTOMATIC_EDITABLE, "admin", TENANT_ID) is True

    async def test_unknown_field_is_denied(self, fields):
        resolver = build(fields)

        assert await resolver.can_edit(999, "admin", TENANT_ID) is False

    async def test_batch_matches_single_calls(self, fields):
        rows = [
            permission(EDITABLE, "editor", True, brand_id=BRAND_ID),
            permission(AUTOMATIC_EDITABLE, "editor", False),
            permission(LOCKED, "editor", True),
        ]
        resolver = build(fields, rows=rows)
        field_ids = [EDITABLE, LOCKED, AUTOMATIC_EDITABLE, 999]

        batch = await resolver.can_edit_multiple(field_ids, "editor", TENANT_ID, BRAND_ID, CATEGORY_ID)
        single = {
            field_id: await resolver.can_edit(field_id, "editor", TENANT_ID, BRAND_ID, CATEGORY_ID)
            for field_id in field_ids
        }

        assert batch == single
        assert batch == {EDITABLE: True, LOCKED: False, AUTOMATIC_EDITABLE: False, 999: False}

    async def test_empty_batch(self, fields):
        resolver = build(fields)

        assert await resolver.can_edit_multiple([], "editor", TENANT_ID) == {}

    @pytest.mark.parametrize("role", ["", "   ", None])
    async def test_empty_role_rejected(self, fields, role):
        resolver = build(fields)

        with pytest.raises(InvalidArgumentError):
            await resolver.can_edit(EDITABLE, role, TENANT_ID)

    async def test_category_without_brand_rejected(self, fields):
        resolver = build(fields)

        with pytest.raises(InvalidArgumentError):
            await resolver.can_edit(EDITABLE, "editor", TENANT_ID, None, CATEGORY_ID)
