from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select

from leaktrack.db.models.catalog import LeakageType, Machine, MachineModel, ProductLine
from .base import BaseRepository


class CatalogRepository(BaseRepository):
    """Repository for product lines, models, leakage types and machines."""

    async def list_product_lines(self) -> List[ProductLine]:
        stmt = select(ProductLine).order_by(ProductLine.name)
        return list(await self.scalars(stmt))

    async def get_product_line_by_code(self, code: str) -> Optional[ProductLine]:
        stmt = select(ProductLine).where(ProductLine.code == code)
        return await self.scalar_one_or_none(stmt)

    async def list_models(self, *, product_line_id: Optional[UUID]) -> List[MachineModel]:
        stmt = select(MachineModel)
        if product_line_id:
            stmt = stmt.where(MachineModel.product_line_id == product_line_id)
        stmt = stmt.order_by(MachineModel.name)
        return list(await self.scalars(stmt))

    async def get_model(self, model_id: UUID) -> Optional[MachineModel]:
        stmt = select(MachineModel).where(MachineModel.id == model_id)
        return await self.scalar_one_or_none(stmt)

    async def list_leakage_types(self, *, product_line_id: Optional[UUID]) -> List[LeakageType]:
        stmt = select(LeakageType)
        if product_line_id:
            stmt = stmt.where(LeakageType.product_line_id == product_line_id)
        stmt = stmt.order_by(LeakageType.name)
        return list(await self.scalars(stmt))

    async def get_leakage_type(self, leakage_type_id: UUID) -> Optional[LeakageType]:
        stmt = select(LeakageType).where(LeakageType.id == leakage_type_id)
        return await self.scalar_one_or_none(stmt)

    async def find_machines(
        self, *, chassis_number: str, model_id: Optional[UUID] = None
    ) -> List[Machine]:
        stmt = select(Machine).where(Machine.chassis_number == chassis_number)
        if model_id:
            stmt = stmt.where(Machine.model_id == model_id)
        stmt = stmt.order_by(Machine.created_at)
        return list(await self.scalars(stmt))

    async def get_machine(self, *, chassis_number: str, model_id: UUID) -> Optional[Machine]:
        stmt = select(Machine).where(
            Machine.chassis_number == chassis_number, Machine.model_id == model_id
        )
        return await self.scalar_one_or_none(stmt)

    async def create_machine(self, *, chassis_number: str, model_id: UUID) -> Machine:
        """Stage a new machine and flush it so its id can be referenced."""
        row = Machine(chassis_number=chassis_number, model_id=model_id)
        await self.add(row)
        await self.flush()
        return row

    # Seeding helpers
    async def ensure_product_line(self, code: str, name: str) -> ProductLine:
        row = await self.get_product_line_by_code(code)
        if row:
            return row
        row = ProductLine(code=code, name=name)
        await self.add(row)
        await self.flush()
        return row

    async def ensure_model(self, product_line: ProductLine, code: str, name: str) -> MachineModel:
        stmt = select(MachineModel).where(
            MachineModel.product_line_id == product_line.id, MachineModel.code == code
        )
        row = await self.scalar_one_or_none(stmt)
        if row:
            return row
        row = MachineModel(product_line_id=product_line.id, code=code, name=name)
        await self.add(row)
        await self.flush()
        return row

    async def ensure_leakage_type(self, product_line: ProductLine, code: str, name: str) -> LeakageType:
        stmt = select(LeakageType).where(
            LeakageType.product_line_id == product_line.id, LeakageType.code == code
        )
        row = await self.scalar_one_or_none(stmt)
        if row:
            return row
        row = LeakageType(product_line_id=product_line.id, code=code, name=name)
        await self.add(row)
        await self.flush()
        return row
