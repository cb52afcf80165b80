from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from leaktrack.db.models.catalog import LeakageType, Machine, MachineModel, ProductLine
from leaktrack.db.models.inspection import InspectionRecord, RepairRecord
from leaktrack.db.models.security import Profile
from .base import BaseRepository

# Relations embedded in inspection reads. The model-level selectin defaults stop
# at the inspection <-> repairs cycle when the load starts from a repair.
INSPECTION_LOADERS = (
    selectinload(InspectionRecord.machine).selectinload(Machine.model).selectinload(MachineModel.product_line),
    selectinload(InspectionRecord.leakage_type),
    selectinload(InspectionRecord.tester),
    selectinload(InspectionRecord.repairs).selectinload(RepairRecord.repairman),
)

REPAIR_LOADERS = (
    selectinload(RepairRecord.repairman),
    selectinload(RepairRecord.inspection).options(*INSPECTION_LOADERS),
)


class InspectionRepository(BaseRepository):
    """
    Repository for inspection and repair records.

    Related machine/model/product line/leakage type/tester/repair rows are
    embedded through the selectin relationships declared on the models.
    """

    async def list_inspections(
        self,
        *,
        statuses: Optional[Sequence[str]] = None,
        severity: Optional[str] = None,
        tester_id: Optional[UUID] = None,
        product_line_id: Optional[UUID] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        oldest_first: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> List[InspectionRecord]:
        stmt = select(InspectionRecord).options(*INSPECTION_LOADERS)
        if statuses:
            stmt = stmt.where(InspectionRecord.status.in_(list(statuses)))
        if severity:
            stmt = stmt.where(InspectionRecord.severity == severity)
        if tester_id:
            stmt = stmt.where(InspectionRecord.tester_id == tester_id)
        if product_line_id:
            stmt = (
                stmt.join(Machine, Machine.id == InspectionRecord.machine_id)
                .join(MachineModel, MachineModel.id == Machine.model_id)
                .where(MachineModel.product_line_id == product_line_id)
            )
        if created_from:
            stmt = stmt.where(InspectionRecord.created_at >= created_from)
        if created_to:
            stmt = stmt.where(InspectionRecord.created_at < created_to)
        order = InspectionRecord.created_at.asc() if oldest_first else InspectionRecord.created_at.desc()
        stmt = stmt.order_by(order).offset(offset).limit(limit)
        return list(await self.scalars(stmt))

    async def get_inspection(self, inspection_id: UUID) -> Optional[InspectionRecord]:
        stmt = (
            select(InspectionRecord)
            .options(*INSPECTION_LOADERS)
            .where(InspectionRecord.id == inspection_id)
            .execution_options(populate_existing=True)
        )
        return await self.scalar_one_or_none(stmt)

    async def create_inspection(
        self,
        *,
        machine_id: UUID,
        tester_id: UUID,
        leakage_type_id: Optional[UUID],
        severity: str,
        status: str,
        remarks: Optional[str],
    ) -> InspectionRecord:
        row = InspectionRecord(
            machine_id=machine_id,
            tester_id=tester_id,
            leakage_type_id=leakage_type_id,
            severity=severity,
            status=status,
            remarks=remarks,
        )
        await self.add(row)
        return row

    async def create_repair(
        self,
        *,
        inspection_id: UUID,
        repairman_id: UUID,
        repair_status: str,
        notes: Optional[str],
        photo_url: Optional[str],
        started_at: Optional[datetime],
        completed_at: Optional[datetime],
    ) -> RepairRecord:
        row = RepairRecord(
            inspection_id=inspection_id,
            repairman_id=repairman_id,
            repair_status=repair_status,
            notes=notes,
            photo_url=photo_url,
            started_at=started_at,
            completed_at=completed_at,
        )
        await self.add(row)
        return row

    async def list_repairs(
        self, *, repairman_id: Optional[UUID] = None, limit: int = 100, offset: int = 0
    ) -> List[RepairRecord]:
        stmt = select(RepairRecord).options(*REPAIR_LOADERS)
        if repairman_id:
            stmt = stmt.where(RepairRecord.repairman_id == repairman_id)
        stmt = stmt.order_by(RepairRecord.created_at.desc()).offset(offset).limit(limit)
        return list(await self.scalars(stmt))

    async def get_repair(self, repair_id: UUID) -> Optional[RepairRecord]:
        stmt = (
            select(RepairRecord)
            .options(*REPAIR_LOADERS)
            .where(RepairRecord.id == repair_id)
            .execution_options(populate_existing=True)
        )
        return await self.scalar_one_or_none(stmt)

    async def list_export_rows(
        self,
        *,
        status: Optional[str],
        created_from: Optional[datetime],
        created_to: Optional[datetime],
    ):
        """Flat rows for report export, newest first."""
        stmt = (
            select(
                Machine.chassis_number,
                ProductLine.code,
                MachineModel.code,
                LeakageType.code,
                InspectionRecord.severity,
                InspectionRecord.status,
                Profile.full_name,
                InspectionRecord.created_at,
            )
            .join(Machine, Machine.id == InspectionRecord.machine_id)
            .join(MachineModel, MachineModel.id == Machine.model_id)
            .join(ProductLine, ProductLine.id == MachineModel.product_line_id)
            .join(Profile, Profile.id == InspectionRecord.tester_id)
            .outerjoin(LeakageType, LeakageType.id == InspectionRecord.leakage_type_id)
            .order_by(InspectionRecord.created_at.desc())
        )
        if status:
            stmt = stmt.where(InspectionRecord.status == status)
        if created_from:
            stmt = stmt.where(InspectionRecord.created_at >= created_from)
        if created_to:
            stmt = stmt.where(InspectionRecord.created_at < created_to)
        res = await self.execute(stmt)
        return list(res.all())
