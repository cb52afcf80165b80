from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AsyncGenerator, List, Optional, Sequence
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from leaktrack.core.exceptions import RoleError
from leaktrack.core.logging import role_var, user_id_var
from leaktrack.core.security import decode_token
from leaktrack.core.settings import AppSettings, get_app_settings
from leaktrack.db.models.security import Profile
from leaktrack.db.session import get_async_session
from leaktrack.repositories.security import SecurityRepository
from leaktrack.services.stats import SummaryConfig
from leaktrack.services.storage import PhotoStorage

logger = logging.getLogger(__name__)

# OAuth2 bearer (used by docs); login endpoint path referenced here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


@dataclass
class SessionContext:
    """
    Who is calling and as which role.

    Built per request from the bearer token and the user_roles table. The
    token only names the active role; holding it is always checked here.
    """
    profile: Profile
    roles: List[str] = field(default_factory=list)
    active_role: Optional[str] = None


# PUBLIC_INTERFACE
def resolve_active_role(requested: Optional[str], held: Sequence[str]) -> Optional[str]:
    """
    Pick the active role for a session.

    A requested role must be held. Without a request, a user holding exactly
    one role gets it; anyone else has to select one explicitly.

    Raises:
        RoleError: the requested role is not held by the user.
    """
    if requested:
        if requested not in held:
            raise RoleError("Role not held by user", {"role": requested, "roles": list(held)})
        return requested
    if len(held) == 1:
        return held[0]
    return None


# PUBLIC_INTERFACE
async def get_db_session(
    session_dep=Depends(get_async_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield the request-scoped AsyncSession."""
    async for session in session_dep:
        yield session


# PUBLIC_INTERFACE
def get_settings_dep() -> AppSettings:
    """Application settings as a dependency so tests can override them."""
    return get_app_settings()


# PUBLIC_INTERFACE
def get_summary_config(settings: AppSettings = Depends(get_settings_dep)) -> SummaryConfig:
    """Aggregation windows and thresholds from settings."""
    return SummaryConfig.from_settings(settings)


# PUBLIC_INTERFACE
def get_photo_storage(settings: AppSettings = Depends(get_settings_dep)) -> PhotoStorage:
    """Blob storage for repair photos."""
    return PhotoStorage.from_settings(settings)


# PUBLIC_INTERFACE
async def get_session_context(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> SessionContext:
    """
    Resolve the caller from the Authorization bearer token.

    Loads the profile, reads its roles from the store and resolves the active
    role from the token's 'role' claim. Also tags log records of this request
    with the user id and role.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    if payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    repo = SecurityRepository(session)
    profile = await repo.get_profile_by_id(user_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not profile.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")

    roles = await repo.list_roles_for_user(profile.id)
    active_role = resolve_active_role(payload.get("role"), roles)

    user_id_var.set(str(profile.id))
    role_var.set(active_role)
    return SessionContext(profile=profile, roles=roles, active_role=active_role)


# PUBLIC_INTERFACE
def require_roles(*allowed: str):
    """
    Create a dependency that requires the session's active role to be one of `allowed`.

    Returns the SessionContext so handlers can use it directly.
    """

    async def _dep(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
        if ctx.active_role is None:
            raise RoleError("No role selected for this session", {"roles": ctx.roles})
        if ctx.active_role not in allowed:
            logger.info("Role %s denied, requires one of %s", ctx.active_role, ", ".join(allowed))
            raise RoleError(
                "Active role not allowed for this resource",
                {"role": ctx.active_role, "allowed": list(allowed)},
            )
        return ctx

    return _dep
