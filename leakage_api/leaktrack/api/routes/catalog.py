from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leaktrack.core.deps import get_db_session, require_roles
from leaktrack.core.exceptions import NotFoundError
from leaktrack.db.models.security import ROLE_ADMIN, ROLE_REPAIRMAN, ROLE_TESTER
from leaktrack.repositories.catalog import CatalogRepository
from leaktrack.schemas.catalog import (
    LeakageTypeRead,
    MachineModelDetail,
    MachineRead,
    ProductLineRead,
)

router = APIRouter(prefix="/catalog", tags=["Catalog"])


# PUBLIC_INTERFACE
@router.get(
    "/product-lines",
    response_model=List[ProductLineRead],
    summary="List product lines",
    description="Product lines ordered by name.",
    dependencies=[Depends(require_roles(ROLE_TESTER, ROLE_ADMIN))],
)
async def list_product_lines(session: AsyncSession = Depends(get_db_session)) -> List[ProductLineRead]:
    rows = await CatalogRepository(session).list_product_lines()
    return [ProductLineRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.get(
    "/models",
    response_model=List[MachineModelDetail],
    summary="List models",
    description="Machine models ordered by name, optionally restricted to one product line.",
    dependencies=[Depends(require_roles(ROLE_TESTER, ROLE_ADMIN))],
)
async def list_models(
    session: AsyncSession = Depends(get_db_session),
    product_line_id: Optional[UUID] = Query(None, description="Filter by product line"),
) -> List[MachineModelDetail]:
    rows = await CatalogRepository(session).list_models(product_line_id=product_line_id)
    return [MachineModelDetail.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.get(
    "/leakage-types",
    response_model=List[LeakageTypeRead],
    summary="List leakage types",
    description="Leakage types ordered by name, optionally restricted to one product line.",
    dependencies=[Depends(require_roles(ROLE_TESTER, ROLE_ADMIN))],
)
async def list_leakage_types(
    session: AsyncSession = Depends(get_db_session),
    product_line_id: Optional[UUID] = Query(None, description="Filter by product line"),
) -> List[LeakageTypeRead]:
    rows = await CatalogRepository(session).list_leakage_types(product_line_id=product_line_id)
    return [LeakageTypeRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.get(
    "/machines/lookup",
    response_model=MachineRead,
    summary="Look up a machine by chassis number",
    description=(
        "Resolve a scanned chassis number to its machine with model and product line. "
        "Without model_id the first registered match is returned."
    ),
    dependencies=[Depends(require_roles(ROLE_TESTER, ROLE_REPAIRMAN, ROLE_ADMIN))],
)
async def lookup_machine(
    session: AsyncSession = Depends(get_db_session),
    chassis_number: str = Query(..., min_length=1, description="Chassis number"),
    model_id: Optional[UUID] = Query(None, description="Model the chassis belongs to"),
) -> MachineRead:
    matches = await CatalogRepository(session).find_machines(
        chassis_number=chassis_number.strip(), model_id=model_id
    )
    if not matches:
        raise NotFoundError(
            "Machine not found",
            {"entity": "machine", "chassis_number": chassis_number, "model_id": str(model_id) if model_id else None},
        )
    return MachineRead.model_validate(matches[0])
