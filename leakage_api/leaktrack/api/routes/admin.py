from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from leaktrack.core.deps import get_db_session, get_settings_dep, get_summary_config, require_roles
from leaktrack.core.security import get_password_hash
from leaktrack.core.settings import AppSettings
from leaktrack.db.base import utcnow
from leaktrack.db.models.security import ROLE_ADMIN
from leaktrack.repositories.inspections import InspectionRepository
from leaktrack.repositories.security import SecurityRepository
from leaktrack.schemas.auth import ProfileCreate, ProfileRead, RoleName
from leaktrack.schemas.common import InspectionStatus, Severity
from leaktrack.schemas.inspections import DashboardRead, InspectionRead, OverviewRead
from leaktrack.services.stats import SummaryConfig, is_delayed, summarize_inspections

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_roles(ROLE_ADMIN))],
)


# PUBLIC_INTERFACE
@router.get(
    "/dashboard",
    response_model=DashboardRead,
    summary="Admin dashboard",
    description=(
        "Most recent inspections plus counts derived from that same batch: status buckets, "
        "leakage-free today/week/month, delayed inspections and most frequent leakage types."
    ),
)
async def dashboard(
    session: AsyncSession = Depends(get_db_session),
    settings: AppSettings = Depends(get_settings_dep),
    config: SummaryConfig = Depends(get_summary_config),
    limit: Optional[int] = Query(None, ge=1, le=500, description="Rows to fetch, default DASHBOARD_RECENT_LIMIT"),
    created_from: Optional[datetime] = Query(None, description="Inclusive lower bound on created_at"),
    created_to: Optional[datetime] = Query(None, description="Exclusive upper bound on created_at"),
    status_filter: Optional[InspectionStatus] = Query(None, alias="status", description="Filter by stored status"),
    severity: Optional[Severity] = Query(None, description="Filter by severity"),
) -> DashboardRead:
    rows = await InspectionRepository(session).list_inspections(
        statuses=[status_filter] if status_filter else None,
        severity=severity,
        created_from=created_from,
        created_to=created_to,
        limit=limit or settings.DASHBOARD_RECENT_LIMIT,
    )
    now = utcnow()
    return DashboardRead(
        generated_at=now,
        delay_threshold_hours=config.delay_threshold_hours,
        summary=summarize_inspections(rows, now, config),
        recent=[
            InspectionRead.from_record(r, delayed=is_delayed(r, now, config.delay_threshold_hours))
            for r in rows
        ],
    )


# PUBLIC_INTERFACE
@router.get(
    "/overview",
    response_model=OverviewRead,
    summary="Admin overview",
    description="The most recent inspections with their repairs, and pending/completed/delayed counts over them.",
)
async def overview(
    session: AsyncSession = Depends(get_db_session),
    settings: AppSettings = Depends(get_settings_dep),
    config: SummaryConfig = Depends(get_summary_config),
) -> OverviewRead:
    rows = await InspectionRepository(session).list_inspections(limit=settings.OVERVIEW_RECENT_LIMIT)
    now = utcnow()
    summary = summarize_inspections(rows, now, config)
    return OverviewRead(
        generated_at=now,
        delay_threshold_hours=config.delay_threshold_hours,
        status_counts=summary.status_counts,
        delayed_count=summary.delayed_count,
        recent=[
            InspectionRead.from_record(r, delayed=is_delayed(r, now, config.delay_threshold_hours))
            for r in rows
        ],
    )


async def _profile_or_404(repo: SecurityRepository, user_id: UUID):
    profile = await repo.get_profile_by_id(user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


# PUBLIC_INTERFACE
@router.get(
    "/users",
    response_model=List[ProfileRead],
    summary="List users",
    description="Profiles ordered by name, each with the roles it holds.",
)
async def list_users(
    session: AsyncSession = Depends(get_db_session),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[ProfileRead]:
    repo = SecurityRepository(session)
    result: List[ProfileRead] = []
    for p in await repo.list_profiles(limit=limit, offset=offset):
        result.append(ProfileRead.from_profile(p, await repo.list_roles_for_user(p.id)))
    return result


# PUBLIC_INTERFACE
@router.post(
    "/users",
    response_model=ProfileRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Create a profile with login credentials and an initial set of roles.",
)
async def create_user(
    payload: ProfileCreate,
    session: AsyncSession = Depends(get_db_session),
) -> ProfileRead:
    repo = SecurityRepository(session)
    if await repo.get_profile_by_email(payload.email):
        raise HTTPException(status_code=400, detail="User with this email already exists")

    profile = await repo.create_profile(
        email=payload.email,
        full_name=payload.full_name,
        hashed_password=get_password_hash(payload.password),
        roles=sorted(set(payload.roles)),
    )
    return ProfileRead.from_profile(profile, await repo.list_roles_for_user(profile.id))


# PUBLIC_INTERFACE
@router.put(
    "/users/{user_id}/roles/{role}",
    response_model=ProfileRead,
    summary="Assign role to user",
)
async def assign_role(
    user_id: UUID = Path(...),
    role: RoleName = Path(...),
    session: AsyncSession = Depends(get_db_session),
) -> ProfileRead:
    repo = SecurityRepository(session)
    profile = await _profile_or_404(repo, user_id)
    await repo.assign_role(user_id, role)
    return ProfileRead.from_profile(profile, await repo.list_roles_for_user(user_id))


# PUBLIC_INTERFACE
@router.delete(
    "/users/{user_id}/roles/{role}",
    response_model=ProfileRead,
    summary="Remove role from user",
)
async def remove_role(
    user_id: UUID = Path(...),
    role: RoleName = Path(...),
    session: AsyncSession = Depends(get_db_session),
) -> ProfileRead:
    repo = SecurityRepository(session)
    profile = await _profile_or_404(repo, user_id)
    await repo.remove_role(user_id, role)
    return ProfileRead.from_profile(profile, await repo.list_roles_for_user(user_id))
