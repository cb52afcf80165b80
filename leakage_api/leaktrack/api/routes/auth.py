from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordRequestForm
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from leaktrack.core.deps import (
    SessionContext,
    get_db_session,
    get_session_context,
    resolve_active_role,
)
from leaktrack.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_password,
)
from leaktrack.repositories.security import SecurityRepository
from leaktrack.schemas.auth import (
    Message,
    ProfileRead,
    RefreshRequest,
    RoleName,
    RoleSelection,
    SessionRead,
    TokenPair,
)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _issue_tokens(user_id: UUID, role: Optional[str]) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(subject=str(user_id), role=role),
        refresh_token=create_refresh_token(subject=str(user_id), role=role),
        role=role,
    )


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenPair,
    summary="Login",
    description=(
        "Authenticate using the OAuth2 password form and receive access/refresh tokens. "
        "Pass `role` to start the session as one of the held roles; a user holding a "
        "single role gets it automatically."
    ),
)
async def login_for_tokens(
    form_data: OAuth2PasswordRequestForm = Depends(),
    role: Optional[RoleName] = Query(None, description="Role to act as"),
    session: AsyncSession = Depends(get_db_session),
) -> TokenPair:
    """Authenticate user and issue tokens."""
    repo = SecurityRepository(session)
    user = await repo.get_profile_by_email(form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=400, detail="User is inactive")

    roles = await repo.list_roles_for_user(user.id)
    return _issue_tokens(user.id, resolve_active_role(role, roles))


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh access token",
    description="Issue a new token pair from a valid refresh token, keeping the selected role.",
)
async def refresh_token(
    payload: RefreshRequest,
    session: AsyncSession = Depends(get_db_session),
) -> TokenPair:
    """Validate refresh token and issue a new access token pair."""
    try:
        claims: Dict[str, Any] = decode_token(payload.refresh_token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    if claims.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid token type")

    try:
        user_id = UUID(str(claims.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    repo = SecurityRepository(session)
    user = await repo.get_profile_by_id(user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")

    roles = await repo.list_roles_for_user(user.id)
    return _issue_tokens(user.id, resolve_active_role(claims.get("role"), roles))


# PUBLIC_INTERFACE
@router.post(
    "/session/role",
    response_model=TokenPair,
    summary="Select active role",
    description="Switch the session to another held role. Returns tokens carrying the new role.",
)
async def select_role(
    payload: RoleSelection,
    ctx: SessionContext = Depends(get_session_context),
) -> TokenPair:
    """Reissue tokens for the selected role."""
    role = resolve_active_role(payload.role, ctx.roles)
    return _issue_tokens(ctx.profile.id, role)


# PUBLIC_INTERFACE
@router.get(
    "/session",
    response_model=SessionRead,
    summary="Read session context",
    description="Return the current profile, the roles it holds and the active role.",
)
async def read_session(ctx: SessionContext = Depends(get_session_context)) -> SessionRead:
    """Return the session context."""
    return SessionRead(
        profile=ProfileRead.from_profile(ctx.profile, ctx.roles),
        roles=ctx.roles,
        active_role=ctx.active_role,
    )


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    response_model=Message,
    summary="Logout",
    description="Stateless logout. Clients discard their tokens, which ends the session context.",
)
async def logout() -> Message:
    """Acknowledge logout in stateless JWT systems."""
    return Message(message="Logged out")
