"""
Built-in system metadata fields and their options
"""
from typing import Any, Dict, List

from schema_engine.models.enums import AppliesTo, FieldType, PopulationMode


def _options(*pairs: tuple) -> List[Dict[str, Any]]:
    return [{"value": value, "system_label": label, "is_system": True} for value, label in pairs]


def get_system_field_definitions() -> List[Dict[str, Any]]:
    """Returns the system fields to seed, each with an ``options`` list"""
    return [
        {
            "key": "photo_type",
            "system_label": "Photo Type",
            "type": FieldType.SELECT,
            "applies_to": AppliesTo.IMAGE,
            "group_key": "creative",
            "options": _options(
                ("studio", "Studio"),
                ("lifestyle", "Lifestyle"),
                ("product", "Product"),
                ("action", "Action"),
                ("plate", "Plate"),
                ("event", "Event"),
            ),
        },
        {
            "key": "logo_type",
            "system_label": "Logo Type",
            "type": FieldType.SELECT,
            "applies_to": AppliesTo.IMAGE,
            "group_key": "creative",
            "options": _options(
                ("primary", "Primary"),
                ("secondary", "Secondary"),
                ("submark", "Submark"),
                ("icon_mark", "Icon / Mark"),
                ("wordmark", "Wordmark"),
                ("monogram", "Monogram"),
                ("lockup", "Lockup"),
            ),
        },
        {
            "key": "orientation",
            "system_label": "Orientation",
            "type": FieldType.SELECT,
            "applies_to": AppliesTo.IMAGE,
            "group_key": "creative",
            "options": _options(("landscape", "Landscape"), ("portrait", "Portrait"), ("square", "Square")),
        },
        {
            "key": "color_space",
            "system_label": "Color Space",
            "type": FieldType.SELECT,
            "applies_to": AppliesTo.IMAGE,
            "group_key": "technical",
            "options": _options(("srgb", "sRGB"), ("adobe_rgb", "Adobe RGB"), ("display_p3", "Display P3")),
        },
        {
            "key": "usage_rights",
            "system_label": "Usage Rights",
            "type": FieldType.SELECT,
            "applies_to": AppliesTo.ALL,
            "group_key": "legal",
            "options": _options(
                ("unrestricted", "Unrestricted"),
                ("editorial_only", "Editorial Only"),
                ("internal_use", "Internal Use"),
                ("licensed", "Licensed"),
                ("restricted", "Restricted"),
            ),
        },
        {
            "key": "expiration_date",
            "system_label": "Expiration Date",
            "type": FieldType.DATE,
            "applies_to": AppliesTo.ALL,
            "group_key": "legal",
        },
        {
            "key": "tags",
            "system_label": "Tags",
            "type": FieldType.MULTISELECT,
            "applies_to": AppliesTo.ALL,
            "group_key": "general",
        },
        {
            "key": "collection",
            "system_label": "Collection",
            "type": FieldType.TEXT,
            "applies_to": AppliesTo.ALL,
            "group_key": "creative",
        },
        {
            "key": "quality_rating",
            "system_label": "Quality Rating",
            "type": FieldType.RATING,
            "applies_to": AppliesTo.ALL,
            "group_key": "internal",
            "is_filterable": False,
            "is_upload_visible": False,
        },
        {
            "key": "starred",
            "system_label": "Starred",
            "type": FieldType.BOOLEAN,
            "applies_to": AppliesTo.ALL,
            "group_key": "internal",
            "is_filterable": False,
            "is_upload_visible": False,
        },
        {
            "key": "dominant_color_bucket",
            "system_label": "Dominant Color",
            "type": FieldType.SELECT,
            "applies_to": AppliesTo.IMAGE,
            "group_key": "technical",
            "is_user_editable": False,
            "is_upload_visible": False,
            "is_internal_only": True,
            "readonly": True,
            "population_mode": PopulationMode.AUTOMATIC,
            "show_on_upload": False,
            "show_on_edit": False,
        },
        {
            "key": "dominant_hue_group",
            "system_label": "Hue Group",
            "type": FieldType.SELECT,
            "applies_to": AppliesTo.IMAGE,
            "group_key": "technical",
            "is_user_editable": False,
            "is_upload_visible": False,
            "is_internal_only": True,
            "readonly": True,
            "population_mode": PopulationMode.AUTOMATIC,
            "show_on_upload": False,
            "show_on_edit": False,
        },
        {
            "key": "dimensions",
            "system_label": "Dimensions",
            "type": FieldType.TEXT,
            "applies_to": AppliesTo.ALL,
            "group_key": "technical",
            "is_user_editable": False,
            "is_upload_visible": False,
            "readonly": True,
            "population_mode": PopulationMode.AUTOMATIC,
            "show_on_upload": False,
            "show_in_filters": False,
        },
    ]
