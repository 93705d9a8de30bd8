import pytest

from schema_engine.services import MetadataPermissionResolver, UploadSchemaResolver
from schema_engine.services.upload_schema import group_label
from tests.fakes import (
    BRAND_ID,
    CATEGORY_ID,
    TENANT_ID,
    InMemoryFieldCatalog,
    InMemoryPermissionStore,
    make_field,
    make_option,
    permission,
    visibility,
)


@pytest.fixture
def fields():
    return [
        make_field(1, "photo_type", type="select", group_key="creative"),
        make_field(2, "tags", type="multiselect", group_key="general"),
        make_field(3, "usage_rights", type="select", group_key="legal"),
        make_field(4, "notes", type="textarea"),
        make_field(5, "quality_rating", type="rating"),
        make_field(6, "internal_code", is_internal_only=True),
        make_field(7, "dominant_color_bucket", type="select", population_mode="automatic", readonly=True),
        make_field(8, "campaign", show_on_upload=False),
        make_field(9, "release_window", type="date", is_upload_visible=False),
        make_field(10, "shoot_location", group_key="shoot_details", is_user_editable=False),
    ]


@pytest.fixture
def build_upload(build_resolver):
    def _build(fields, visibility_rows=(), options=(), permission_rows=()):
        catalog = InMemoryFieldCatalog(fields)
        return UploadSchemaResolver(
            schema_resolver=build_resolver(fields, visibility_rows=visibility_rows, options=options),
            permission_resolver=MetadataPermissionResolver(InMemoryPermissionStore(permission_rows), catalog),
            field_catalog=catalog,
        )

    return _build


def _keys(schema):
    return [field.key for group in schema.groups for field in group.fields]


class TestUploadSchemaResolver:
    """Test the upload form view."""

    async def test_excludes_non_upload_fields(self, build_upload, fields):
        resolver = build_upload(fields)

        schema = await resolver.resolve(TENANT_ID, None, None, "image")

        assert sorted(_keys(schema)) == ["notes", "photo_type", "shoot_location", "tags", "usage_rights"]

    async def test_upload_hidden_and_suppressed_fields_excluded(self, build_upload, fields):
        resolver = build_upload(
            fields,
            visibility_rows=[
                visibility(1, brand_id=BRAND_ID, category_id=CATEGORY_ID, is_hidden=True),
                visibility(3, brand_id=BRAND_ID, is_upload_hidden=True),
                visibility(9, brand_id=BRAND_ID, category_id=CATEGORY_ID, is_upload_hidden=False),
            ],
        )

        schema = await resolver.resolve(TENANT_ID, BRAND_ID, CATEGORY_ID, "image")

        assert "photo_type" not in _keys(schema)
        assert "usage_rights" not in _keys(schema)
        assert "release_window" in _keys(schema)

    async def test_groups_sorted_with_labels(self, build_upload, fields):
        resolver = build_upload(fields)

        schema = await resolver.resolve(TENANT_ID, None, None, "image")

        assert [(group.key, group.label) for group in schema.groups] == [
            ("creative", "Creative"),
            ("general", "General"),
            ("legal", "Legal / Rights"),
            ("shoot_details", "Shoot Details"),
        ]
        general = next(group for group in schema.groups if group.key == "general")
        assert [field.key for field in general.fields] == ["tags", "notes"]

    async def test_without_role_everything_editable(self, build_upload, fields):
        resolver = build_upload(fields)

        schema = await resolver.resolve(TENANT_ID, None, None, "image")

        assert all(field.can_edit for group in schema.groups for field in group.fields)

    async def test_with_role_uses_permissions_and_user_editable(self, build_upload, fields):
        resolver = build_upload(
            fields,
            permission_rows=[
                permission(1, "editor", True),
                permission(2, "editor", False),
                permission(10, "editor", True),
            ],
        )

        schema = await resolver.resolve(TENANT_ID, None, None, "image", role="editor")
        can_edit = {field.key: field.can_edit for group in schema.groups for field in group.fields}

        assert can_edit == {
            "photo_type": True,
            "tags": False,
            "usage_rights": False,
            "notes": False,
            "shoot_location": False,
        }

    async def test_admin_still_bound_by_user_editable(self, build_upload, fields):
        resolver = build_upload(fields)

        schema = await resolver.resolve(TENANT_ID, None, None, "image", role="admin")
        can_edit = {field.key: field.can_edit for group in schema.groups for field in group.fields}

        assert can_edit["photo_type"] is True
        assert can_edit["shoot_location"] is False

    async def test_required_and_options_carried_through(self, build_upload, fields):
        resolver = build_upload(
            fields,
            visibility_rows=[visibility(1, brand_id=BRAND_ID, category_id=CATEGORY_ID, is_required=True)],
            options=[make_option(11, 1, "studio"), make_option(12, 1, "action")],
        )

        schema = await resolver.resolve(TENANT_ID, BRAND_ID, CATEGORY_ID, "image")
        photo_type = next(field for group in schema.groups for field in group.fields if field.key == "photo_type")

        assert photo_type.is_required is True
        assert [option.value for option in photo_type.options] == ["action", "studio"]
        assert photo_type.display_label == "Photo Type"
        assert photo_type.type == "select"


class TestGroupLabel:
    """Test group label mapping."""

    @pytest.mark.parametrize(
        "group_key,label",
        [
            ("general", "General"),
            ("legal_rights", "Legal / Rights"),
            ("AI", "AI / System"),
            ("ai_system", "AI / System"),
            ("technical", "Technical"),
            ("brand-assets", "Brand Assets"),
            ("print_specs", "Print Specs"),
        ],
    )
    def test_labels(self, group_key, label):
        assert group_label(group_key) == label
