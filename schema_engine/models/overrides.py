import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from schema_engine.database import Base

# Category rows always carry their brand
SCOPE_SHAPE_CHECK = "category_id IS NULL OR brand_id IS NOT NULL"


class MetadataFieldVisibility(Base):
    """Scoped visibility exception for one field.

    A null flag means the row does not set it, so the next less specific
    row (or the field default) decides. ``is_hidden`` is category
    suppression and is only honoured on category-scoped rows.
    """

    __tablename__ = "metadata_field_visibility"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    metadata_field_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("metadata_fields.id", ondelete="CASCADE"), nullable=False
    )
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    brand_id: Mapped[int | None] = mapped_column(Integer)
    category_id: Mapped[int | None] = mapped_column(Integer)
    is_hidden: Mapped[bool | None] = mapped_column(Boolean)
    is_upload_hidden: Mapped[bool | None] = mapped_column(Boolean)
    is_edit_hidden: Mapped[bool | None] = mapped_column(Boolean)
    is_filter_hidden: Mapped[bool | None] = mapped_column(Boolean)
    is_primary: Mapped[bool | None] = mapped_column(Boolean)
    is_required: Mapped[bool | None] = mapped_column(Boolean)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(SCOPE_SHAPE_CHECK, name="ck_metadata_field_visibility_scope_shape"),
        Index("ix_metadata_field_visibility_lookup", "tenant_id", "metadata_field_id", "brand_id", "category_id"),
    )


class MetadataOptionVisibility(Base):
    __tablename__ = "metadata_option_visibility"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    metadata_option_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("metadata_options.id", ondelete="CASCADE"), nullable=False
    )
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    brand_id: Mapped[int | None] = mapped_column(Integer)
    category_id: Mapped[int | None] = mapped_column(Integer)
    is_hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint(SCOPE_SHAPE_CHECK, name="ck_metadata_option_visibility_scope_shape"),
        Index("ix_metadata_option_visibility_lookup", "tenant_id", "brand_id", "category_id"),
    )


class MetadataFieldPermission(Base):
    """Role-scoped edit permission exception for one field."""

    __tablename__ = "metadata_field_permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    metadata_field_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("metadata_fields.id", ondelete="CASCADE"), nullable=False
    )
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    brand_id: Mapped[int | None] = mapped_column(Integer)
    category_id: Mapped[int | None] = mapped_column(Integer)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    can_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint(SCOPE_SHAPE_CHECK, name="ck_metadata_field_permissions_scope_shape"),
        Index("ix_metadata_field_permissions_lookup", "tenant_id", "role", "metadata_field_id"),
    )
