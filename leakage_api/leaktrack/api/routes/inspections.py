from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from leaktrack.core.deps import SessionContext, get_db_session, get_summary_config, require_roles
from leaktrack.core.exceptions import NotFoundError
from leaktrack.db.base import utcnow
from leaktrack.db.models.security import ROLE_ADMIN, ROLE_REPAIRMAN, ROLE_TESTER
from leaktrack.repositories.inspections import InspectionRepository
from leaktrack.schemas.inspections import InspectionCreate, InspectionRead
from leaktrack.services.inspections import InspectionService
from leaktrack.services.stats import SummaryConfig, is_delayed

router = APIRouter(prefix="/inspections", tags=["Inspections"])


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=InspectionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit inspection",
    description=(
        "Record a leakage inspection for a scanned chassis. The machine is registered on "
        "first sight. Severity 'None' completes the inspection immediately, anything else "
        "leaves it Pending for repair."
    ),
)
async def submit_inspection(
    payload: InspectionCreate,
    ctx: SessionContext = Depends(require_roles(ROLE_TESTER)),
    session: AsyncSession = Depends(get_db_session),
    config: SummaryConfig = Depends(get_summary_config),
) -> InspectionRead:
    row = await InspectionService(session).submit(payload, ctx.profile)
    return InspectionRead.from_record(row, delayed=is_delayed(row, utcnow(), config.delay_threshold_hours))


# PUBLIC_INTERFACE
@router.get(
    "/mine",
    response_model=List[InspectionRead],
    summary="My inspections",
    description="Inspections submitted by the current tester, newest first.",
)
async def list_my_inspections(
    ctx: SessionContext = Depends(require_roles(ROLE_TESTER)),
    session: AsyncSession = Depends(get_db_session),
    config: SummaryConfig = Depends(get_summary_config),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> List[InspectionRead]:
    rows = await InspectionRepository(session).list_inspections(
        tester_id=ctx.profile.id, limit=limit, offset=offset
    )
    now = utcnow()
    return [
        InspectionRead.from_record(r, delayed=is_delayed(r, now, config.delay_threshold_hours))
        for r in rows
    ]


# PUBLIC_INTERFACE
@router.get(
    "/{inspection_id}",
    response_model=InspectionRead,
    summary="Inspection detail",
    description="One inspection with machine, model, product line, leakage type, tester and repairs.",
    dependencies=[Depends(require_roles(ROLE_TESTER, ROLE_REPAIRMAN, ROLE_ADMIN))],
)
async def get_inspection(
    inspection_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    config: SummaryConfig = Depends(get_summary_config),
) -> InspectionRead:
    row = await InspectionRepository(session).get_inspection(inspection_id)
    if row is None:
        raise NotFoundError("Inspection not found", {"entity": "inspection", "id": str(inspection_id)})
    return InspectionRead.from_record(row, delayed=is_delayed(row, utcnow(), config.delay_threshold_hours))
