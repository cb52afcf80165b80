from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from leaktrack.core.deps import get_db_session, require_roles
from leaktrack.db.models.security import ROLE_ADMIN
from leaktrack.repositories.inspections import InspectionRepository
from leaktrack.schemas.common import InspectionStatus
from leaktrack.services.export import export_dataframe, inspections_dataframe

# PUBLIC_INTERFACE
router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)


# PUBLIC_INTERFACE
@router.get(
    "/inspections",
    summary="Inspections export",
    description=(
        "Export inspections newest first with columns chassis_number, product_line, model, "
        "leakage_type, severity, status, tester, created_at."
    ),
    response_class=StreamingResponse,
    dependencies=[Depends(require_roles(ROLE_ADMIN))],
)
async def inspections_report(
    session: AsyncSession = Depends(get_db_session),
    status: Optional[InspectionStatus] = Query(None, description="Filter by stored status"),
    created_from: Optional[datetime] = Query(None, description="Inclusive lower bound on created_at"),
    created_to: Optional[datetime] = Query(None, description="Exclusive upper bound on created_at"),
    format: Literal["csv", "xlsx", "pdf"] = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    rows = await InspectionRepository(session).list_export_rows(
        status=status, created_from=created_from, created_to=created_to
    )
    return export_dataframe(inspections_dataframe(rows), "leakage_inspections", format)
