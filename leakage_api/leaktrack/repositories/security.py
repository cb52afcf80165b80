from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select

from leaktrack.db.models.security import Profile, UserRole
from .base import BaseRepository


class SecurityRepository(BaseRepository):
    """Repository for profiles and their role assignments."""

    # Profiles
    async def get_profile_by_email(self, email: str) -> Optional[Profile]:
        stmt = select(Profile).where(Profile.email == email)
        return await self.scalar_one_or_none(stmt)

    async def get_profile_by_id(self, user_id: UUID) -> Optional[Profile]:
        stmt = select(Profile).where(Profile.id == user_id).execution_options(populate_existing=True)
        return await self.scalar_one_or_none(stmt)

    async def count_profiles(self) -> int:
        result = await self.execute(select(func.count(Profile.id)))
        return int(result.scalar_one())

    async def list_profiles(self, limit: int = 100, offset: int = 0) -> List[Profile]:
        stmt = select(Profile).order_by(Profile.full_name).offset(offset).limit(limit)
        return list(await self.scalars(stmt))

    async def create_profile(
        self,
        *,
        email: str,
        full_name: str,
        hashed_password: str,
        roles: Optional[List[str]] = None,
        is_active: bool = True,
    ) -> Profile:
        profile = Profile(
            email=email,
            full_name=full_name,
            hashed_password=hashed_password,
            is_active=is_active,
            roles=[UserRole(role=r) for r in (roles or [])],
        )
        await self.add(profile)
        await self.commit()
        return profile

    # Roles
    async def list_roles_for_user(self, user_id: UUID) -> List[str]:
        stmt = select(UserRole.role).where(UserRole.user_id == user_id).order_by(UserRole.role)
        return list(await self.scalars(stmt))

    async def assign_role(self, user_id: UUID, role: str) -> None:
        if role in await self.list_roles_for_user(user_id):
            return
        await self.add(UserRole(user_id=user_id, role=role))
        await self.commit()

    async def remove_role(self, user_id: UUID, role: str) -> None:
        stmt = delete(UserRole).where(UserRole.user_id == user_id, UserRole.role == role)
        await self.execute(stmt)
        await self.commit()
