import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from schema_engine.database import Base
from schema_engine.models.enums import AppliesTo, FieldScope, FieldType, PopulationMode


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class MetadataField(Base):
    __tablename__ = "metadata_fields"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    system_label: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[FieldType] = mapped_column(
        Enum(FieldType, name="metadata_field_type", values_callable=_enum_values), nullable=False
    )
    scope: Mapped[FieldScope] = mapped_column(
        Enum(FieldScope, name="metadata_field_scope", values_callable=_enum_values),
        nullable=False,
        default=FieldScope.SYSTEM,
    )
    tenant_id: Mapped[int | None] = mapped_column(Integer, index=True)
    applies_to: Mapped[AppliesTo] = mapped_column(
        Enum(AppliesTo, name="metadata_field_applies_to", values_callable=_enum_values),
        nullable=False,
        default=AppliesTo.ALL,
    )
    is_filterable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_user_editable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_ai_trainable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_upload_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_internal_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    readonly: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    population_mode: Mapped[PopulationMode] = mapped_column(
        Enum(PopulationMode, name="metadata_population_mode", values_callable=_enum_values),
        nullable=False,
        default=PopulationMode.MANUAL,
    )
    show_on_upload: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_on_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_in_filters: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    group_key: Mapped[str | None] = mapped_column(String(100))
    display_widget: Mapped[str | None] = mapped_column(String(50))
    # Legacy global placement; category overrides supersede it
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    deprecated_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True))
    archived_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    options = relationship("MetadataOption", back_populates="field", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("scope", "tenant_id", "key", name="uq_metadata_fields_scope_tenant_id_key"),
        CheckConstraint(
            "(scope = 'system' AND tenant_id IS NULL) OR (scope = 'tenant' AND tenant_id IS NOT NULL)",
            name="ck_metadata_fields_scope_tenant",
        ),
    )


class MetadataOption(Base):
    __tablename__ = "metadata_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    metadata_field_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("metadata_fields.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value: Mapped[str] = mapped_column(String(255), nullable=False)
    system_label: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str | None] = mapped_column(String(32))
    icon: Mapped[str | None] = mapped_column(String(64))
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    field = relationship("MetadataField", back_populates="options")

    __table_args__ = (UniqueConstraint("metadata_field_id", "value", name="uq_metadata_options_field_id_value"),)
