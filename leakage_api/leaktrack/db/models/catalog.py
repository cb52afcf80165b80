from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leaktrack.db.base import Base, TimestampMixin, UUIDPkMixin


class ProductLine(UUIDPkMixin, TimestampMixin, Base):
    """Top-level product category (e.g. EXC for excavators)."""
    __tablename__ = "product_lines"

    code: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)


class MachineModel(UUIDPkMixin, TimestampMixin, Base):
    """Machine model belonging to exactly one product line."""
    __tablename__ = "models"

    product_line_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("product_lines.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    product_line: Mapped[ProductLine] = relationship(lazy="selectin")


class LeakageType(UUIDPkMixin, TimestampMixin, Base):
    """Catalog of defect categories, scoped to a product line."""
    __tablename__ = "leakage_types"

    product_line_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("product_lines.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Machine(UUIDPkMixin, TimestampMixin, Base):
    """A physical machine identified by its chassis number within a model."""
    __tablename__ = "machines"
    __table_args__ = (
        UniqueConstraint("chassis_number", "model_id", name="uq_machines_chassis_model"),
    )

    model_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("models.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    chassis_number: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    model: Mapped[MachineModel] = relationship(lazy="selectin")
