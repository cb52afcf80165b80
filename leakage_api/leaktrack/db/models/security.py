from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leaktrack.db.base import Base, TimestampMixin, UUIDPkMixin

ROLE_ADMIN = "admin"
ROLE_TESTER = "tester"
ROLE_REPAIRMAN = "repairman"
ROLES = (ROLE_ADMIN, ROLE_TESTER, ROLE_REPAIRMAN)


class Profile(UUIDPkMixin, TimestampMixin, Base):
    """
    Display identity of a user, also holding the login credentials.

    Roles live in user_roles, not on the profile, so that one person may act
    as more than one role.
    """
    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

    roles: Mapped[list["UserRole"]] = relationship(
        back_populates="user", lazy="selectin", cascade="all, delete-orphan"
    )


class UserRole(UUIDPkMixin, TimestampMixin, Base):
    """Authorization grouping: one row per (user, role)."""
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(Text, nullable=False)  # admin/tester/repairman

    user: Mapped[Optional[Profile]] = relationship(back_populates="roles")
