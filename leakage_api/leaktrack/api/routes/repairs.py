from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from leaktrack.core.deps import (
    SessionContext,
    get_db_session,
    get_photo_storage,
    get_summary_config,
    require_roles,
)
from leaktrack.db.base import utcnow
from leaktrack.db.models.inspection import OPEN_STATUSES
from leaktrack.db.models.security import ROLE_ADMIN, ROLE_REPAIRMAN
from leaktrack.repositories.inspections import InspectionRepository
from leaktrack.schemas.common import RepairStatus
from leaktrack.schemas.inspections import InspectionRead, RepairWithInspection
from leaktrack.services.repairs import RepairService
from leaktrack.services.stats import SummaryConfig, is_delayed
from leaktrack.services.storage import PhotoStorage

router = APIRouter(prefix="/repairs", tags=["Repairs"])


def _repair_read(repair, config: SummaryConfig, now) -> RepairWithInspection:
    inspection = InspectionRead.from_record(
        repair.inspection, delayed=is_delayed(repair.inspection, now, config.delay_threshold_hours)
    )
    return RepairWithInspection.model_validate(repair).model_copy(update={"inspection": inspection})


# PUBLIC_INTERFACE
@router.get(
    "/queue",
    response_model=List[InspectionRead],
    summary="Repair queue",
    description="Inspections awaiting repair (Pending, or Delayed on legacy rows), oldest first.",
    dependencies=[Depends(require_roles(ROLE_REPAIRMAN, ROLE_ADMIN))],
)
async def repair_queue(
    session: AsyncSession = Depends(get_db_session),
    config: SummaryConfig = Depends(get_summary_config),
    product_line_id: Optional[UUID] = Query(None, description="Filter by product line"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> List[InspectionRead]:
    rows = await InspectionRepository(session).list_inspections(
        statuses=OPEN_STATUSES,
        product_line_id=product_line_id,
        oldest_first=True,
        limit=limit,
        offset=offset,
    )
    now = utcnow()
    return [
        InspectionRead.from_record(r, delayed=is_delayed(r, now, config.delay_threshold_hours))
        for r in rows
    ]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=RepairWithInspection,
    status_code=status.HTTP_201_CREATED,
    summary="Submit repair",
    description=(
        "Record the outcome of a repair as multipart form data with an optional proof photo. "
        "The inspection is marked Completed. A failed photo upload does not block the repair."
    ),
)
async def submit_repair(
    inspection_id: UUID = Form(...),
    repair_status: RepairStatus = Form(...),
    notes: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    ctx: SessionContext = Depends(require_roles(ROLE_REPAIRMAN)),
    session: AsyncSession = Depends(get_db_session),
    storage: PhotoStorage = Depends(get_photo_storage),
    config: SummaryConfig = Depends(get_summary_config),
) -> RepairWithInspection:
    photo_data = await photo.read() if photo is not None else None
    repair = await RepairService(session, storage).submit(
        inspection_id=inspection_id,
        repairman=ctx.profile,
        repair_status=repair_status,
        notes=notes,
        photo_filename=photo.filename if photo is not None else None,
        photo_data=photo_data,
    )
    return _repair_read(repair, config, utcnow())


# PUBLIC_INTERFACE
@router.get(
    "/mine",
    response_model=List[RepairWithInspection],
    summary="My repairs",
    description="Repairs recorded by the current repairman, newest first.",
)
async def list_my_repairs(
    ctx: SessionContext = Depends(require_roles(ROLE_REPAIRMAN)),
    session: AsyncSession = Depends(get_db_session),
    config: SummaryConfig = Depends(get_summary_config),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> List[RepairWithInspection]:
    rows = await InspectionRepository(session).list_repairs(
        repairman_id=ctx.profile.id, limit=limit, offset=offset
    )
    now = utcnow()
    return [_repair_read(r, config, now) for r in rows]
