from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

RoleName = Literal["admin", "tester", "repairman"]


class TokenPair(BaseModel):
    """Access and refresh tokens."""
    token_type: str = Field("bearer", description="Token type, typically 'bearer'")
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    role: Optional[RoleName] = Field(None, description="Role active for this session")


class RefreshRequest(BaseModel):
    """Request to refresh an access token."""
    refresh_token: str = Field(..., description="Refresh token")


class RoleSelection(BaseModel):
    """Role the user wants to act as for the rest of the session."""
    role: RoleName = Field(..., description="One of the roles held by the user")


class Message(BaseModel):
    """Simple message response."""
    message: str = Field(...)


class ProfileRead(BaseModel):
    """Profile read model."""
    id: UUID = Field(..., description="Profile ID")
    email: EmailStr = Field(..., description="Login email")
    full_name: str = Field(..., description="Display name")
    is_active: bool = Field(..., description="Active flag")
    roles: List[RoleName] = Field(default_factory=list, description="Roles held")
    created_at: datetime = Field(..., description="Created timestamp")

    class Config:
        from_attributes = True

    @classmethod
    def from_profile(cls, profile: Any, roles: List[str]) -> "ProfileRead":
        return cls(
            id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            is_active=profile.is_active,
            roles=roles,
            created_at=profile.created_at,
        )


class SessionRead(BaseModel):
    """Per-request session context: who is calling and as which role."""
    profile: ProfileRead
    roles: List[RoleName] = Field(default_factory=list, description="Roles held")
    active_role: Optional[RoleName] = Field(None, description="Role selected for this session")


class ProfileCreate(BaseModel):
    """Admin create profile payload."""
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., min_length=6, description="Password")
    full_name: str = Field(..., min_length=1)
    roles: List[RoleName] = Field(default_factory=list)
