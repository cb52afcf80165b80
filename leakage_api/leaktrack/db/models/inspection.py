from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leaktrack.db.base import Base, TimestampMixin, UUIDPkMixin
from leaktrack.db.models.catalog import LeakageType, Machine
from leaktrack.db.models.security import Profile

SEVERITY_NONE = "None"
SEVERITIES = (SEVERITY_NONE, "Low", "Medium", "High")

STATUS_PENDING = "Pending"
STATUS_COMPLETED = "Completed"
# Only found on legacy rows; delay is derived at read time and never written.
STATUS_DELAYED = "Delayed"
OPEN_STATUSES = (STATUS_PENDING, STATUS_DELAYED)

REPAIR_REPAIRABLE = "Repairable"
REPAIR_NOT_REPAIRABLE = "Not Repairable"
REPAIR_STATUSES = (REPAIR_REPAIRABLE, REPAIR_NOT_REPAIRABLE)


class InspectionRecord(UUIDPkMixin, TimestampMixin, Base):
    """One leakage test event on a machine, submitted by a tester."""
    __tablename__ = "inspection_records"

    machine_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("machines.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    tester_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    leakage_type_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("leakage_types.id", ondelete="SET NULL"), nullable=True
    )
    severity: Mapped[str] = mapped_column(Text, nullable=False, default=SEVERITY_NONE)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=STATUS_PENDING, index=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    machine: Mapped[Machine] = relationship(lazy="selectin")
    leakage_type: Mapped[Optional[LeakageType]] = relationship(lazy="selectin")
    tester: Mapped[Profile] = relationship(lazy="selectin")
    repairs: Mapped[list["RepairRecord"]] = relationship(
        back_populates="inspection",
        lazy="selectin",
        order_by="RepairRecord.created_at",
    )


class RepairRecord(UUIDPkMixin, TimestampMixin, Base):
    """Resolution of an inspection by a repairman, with optional proof photo."""
    __tablename__ = "repair_records"

    inspection_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("inspection_records.id", ondelete="CASCADE"), nullable=False, index=True
    )
    repairman_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    repair_status: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    inspection: Mapped[InspectionRecord] = relationship(back_populates="repairs", lazy="selectin")
    repairman: Mapped[Profile] = relationship(lazy="selectin")
