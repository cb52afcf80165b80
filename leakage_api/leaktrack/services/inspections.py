from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from leaktrack.core.exceptions import NotFoundError
from leaktrack.db.models.inspection import (
    SEVERITY_NONE,
    STATUS_COMPLETED,
    STATUS_PENDING,
    InspectionRecord,
)
from leaktrack.db.models.security import Profile
from leaktrack.repositories.catalog import CatalogRepository
from leaktrack.repositories.inspections import InspectionRepository
from leaktrack.schemas.inspections import InspectionCreate
from leaktrack.services.base import BaseService

logger = logging.getLogger(__name__)


class InspectionService(BaseService):
    """
    Tester-side writes.

    A submission is a two-step write: make sure the machine exists, then insert
    the inspection. Nothing is retried and a double submit inserts twice.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.catalog = CatalogRepository(session)
        self.inspections = InspectionRepository(session)

    # PUBLIC_INTERFACE
    async def submit(self, payload: InspectionCreate, tester: Profile) -> InspectionRecord:
        """
        Record an inspection for the scanned chassis.

        Parameters:
            payload: chassis number, model, leakage type, severity, remarks
            tester: profile of the submitting tester
        Returns:
            The stored inspection with its relations loaded.
        Raises:
            NotFoundError: unknown model, or leakage type outside the model's product line
        """
        model = await self.catalog.get_model(payload.model_id)
        if model is None:
            raise NotFoundError("Model not found", {"model_id": str(payload.model_id)})

        if payload.leakage_type_id is not None:
            leakage_type = await self.catalog.get_leakage_type(payload.leakage_type_id)
            if leakage_type is None or leakage_type.product_line_id != model.product_line_id:
                raise NotFoundError(
                    "Leakage type not found for this product line",
                    {"leakage_type_id": str(payload.leakage_type_id)},
                )

        chassis = payload.chassis_number.strip()
        machine = await self.catalog.get_machine(chassis_number=chassis, model_id=model.id)
        new_machine = machine is None
        if new_machine:
            machine = await self.catalog.create_machine(chassis_number=chassis, model_id=model.id)
            logger.info("Registered machine %s for model %s", chassis, model.code)

        status = STATUS_COMPLETED if payload.severity == SEVERITY_NONE else STATUS_PENDING
        row = await self.inspections.create_inspection(
            machine_id=machine.id,
            tester_id=tester.id,
            leakage_type_id=payload.leakage_type_id,
            severity=payload.severity,
            status=status,
            remarks=payload.remarks,
        )
        await self.inspections.commit()
        logger.info("Inspection %s recorded for chassis %s (%s)", row.id, chassis, status)

        return await self.reload(
            self.inspections.get_inspection, row.id, row, machine if new_machine else None
        )
