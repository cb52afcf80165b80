"""
Database seeding utilities for reference data.

Seeds:
- Product lines (EXC, BHL, WHL)
- A few machine models per product line
- Leakage types per product line
- An admin profile (SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD)

Every step looks rows up by code or email first, so running it twice is safe.

Usage:
  python -m leaktrack.db.run_migrations upgrade head
  python -m leaktrack.db.seed
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from leaktrack.core.security import get_password_hash
from leaktrack.core.settings import get_app_settings
from leaktrack.db.models.security import ROLE_ADMIN
from leaktrack.db.session import session_scope
from leaktrack.repositories.catalog import CatalogRepository
from leaktrack.repositories.security import SecurityRepository

logger = logging.getLogger(__name__)

PRODUCT_LINES: List[Tuple[str, str]] = [
    ("EXC", "Excavators"),
    ("BHL", "Backhoe Loaders"),
    ("WHL", "Wheel Loaders"),
]

MODELS: Dict[str, List[Tuple[str, str]]] = {
    "EXC": [("EX-210", "EX 210 Crawler"), ("EX-140", "EX 140 Compact")],
    "BHL": [("BH-3DX", "3DX Backhoe"), ("BH-4DX", "4DX Backhoe")],
    "WHL": [("WL-432", "432 Wheel Loader")],
}

LEAKAGE_TYPES: List[Tuple[str, str]] = [
    ("HYD-HOSE", "Hydraulic hose"),
    ("CYL-SEAL", "Cylinder seal"),
    ("ENG-OIL", "Engine oil"),
    ("COOLANT", "Coolant"),
    ("FUEL", "Fuel line"),
]


async def _seed_catalog(session: AsyncSession) -> None:
    repo = CatalogRepository(session)
    for pl_code, pl_name in PRODUCT_LINES:
        product_line = await repo.ensure_product_line(pl_code, pl_name)
        for code, name in MODELS.get(pl_code, []):
            await repo.ensure_model(product_line, code, name)
        for code, name in LEAKAGE_TYPES:
            await repo.ensure_leakage_type(product_line, code, name)
    await repo.commit()


async def _seed_admin(session: AsyncSession) -> None:
    settings = get_app_settings()
    repo = SecurityRepository(session)
    existing = await repo.get_profile_by_email(settings.SEED_ADMIN_EMAIL)
    if existing:
        await repo.assign_role(existing.id, ROLE_ADMIN)
        return
    await repo.create_profile(
        email=settings.SEED_ADMIN_EMAIL,
        full_name="Administrator",
        hashed_password=get_password_hash(settings.SEED_ADMIN_PASSWORD),
        roles=[ROLE_ADMIN],
    )
    logger.info("Seeded admin profile %s", settings.SEED_ADMIN_EMAIL)


# PUBLIC_INTERFACE
async def seed_session(session: AsyncSession) -> None:
    """Seed reference catalog data and the admin profile using the given session."""
    await _seed_catalog(session)
    await _seed_admin(session)


# PUBLIC_INTERFACE
async def seed_all() -> None:
    """Seed the configured database with reference data."""
    async with session_scope() as session:
        await seed_session(session)


# PUBLIC_INTERFACE
def main() -> None:
    """Entrypoint to run the asynchronous seeding."""
    asyncio.run(seed_all())


if __name__ == "__main__":
    main()
