"""
Pytest configuration and fixtures
"""

import os
import tempfile
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID, uuid4

# Settings are read when the app module is imported.
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("AUTO_SEED", "false")
os.environ.setdefault("PHOTO_STORAGE_DIR", tempfile.mkdtemp(prefix="leaktrack-photos-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leaktrack.api.main import app
from leaktrack.core.deps import get_db_session, get_photo_storage
from leaktrack.core.security import create_access_token, get_password_hash
from leaktrack.db.base import Base, utcnow
from leaktrack.db.models import (
    InspectionRecord,
    LeakageType,
    Machine,
    MachineModel,
    Profile,
    ProductLine,
    UserRole,
)
from leaktrack.services.storage import PhotoStorage

TEST_DATABASE_URL = "sqlite+aiosqlite://"
PASSWORD = "secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)


@dataclass
class SeedData:
    """Ids of the reference rows every API test starts with."""
    product_line_id: UUID
    model_id: UUID
    hose_leak_id: UUID
    seal_leak_id: UUID
    other_model_id: UUID
    other_leak_id: UUID
    admin_id: UUID
    tester_id: UUID
    repairman_id: UUID
    dual_id: UUID


async def _create_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _seed(maker) -> SeedData:
    async with maker() as session:
        exc = ProductLine(code="EXC", name="Excavators")
        bhl = ProductLine(code="BHL", name="Backhoe Loaders")
        session.add_all([exc, bhl])
        await session.flush()

        ex210 = MachineModel(product_line_id=exc.id, code="EX-210", name="EX 210 Crawler")
        bh3dx = MachineModel(product_line_id=bhl.id, code="BH-3DX", name="3DX Backhoe")
        hose = LeakageType(product_line_id=exc.id, code="HYD-HOSE", name="Hydraulic hose")
        seal = LeakageType(product_line_id=exc.id, code="CYL-SEAL", name="Cylinder seal")
        fuel = LeakageType(product_line_id=bhl.id, code="FUEL", name="Fuel line")
        session.add_all([ex210, bh3dx, hose, seal, fuel])

        def profile(email: str, name: str, *roles: str) -> Profile:
            return Profile(
                email=email,
                full_name=name,
                hashed_password=PASSWORD_HASH,
                is_active=True,
                roles=[UserRole(role=r) for r in roles],
            )

        admin = profile("admin@example.com", "Ada Admin", "admin")
        tester = profile("tester@example.com", "Tomas Tester", "tester")
        repairman = profile("repair@example.com", "Rosa Repair", "repairman")
        dual = profile("dual@example.com", "Dana Dual", "tester", "repairman")
        session.add_all([admin, tester, repairman, dual])
        await session.commit()

        return SeedData(
            product_line_id=exc.id,
            model_id=ex210.id,
            hose_leak_id=hose.id,
            seal_leak_id=seal.id,
            other_model_id=bh3dx.id,
            other_leak_id=fuel.id,
            admin_id=admin.id,
            tester_id=tester.id,
            repairman_id=repairman.id,
            dual_id=dual.id,
        )


@pytest.fixture
def photo_storage(tmp_path):
    return PhotoStorage(tmp_path / "photos", "/photos")


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of one test."""
    return create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False, autocommit=False)


@pytest.fixture
def client(engine, session_maker, photo_storage):
    """Create test client with database and storage overrides"""

    async def override_get_db_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_photo_storage] = lambda: photo_storage

    with TestClient(app) as test_client:
        # The engine must be driven from the client's event loop.
        test_client.portal.call(_create_schema, engine)
        yield test_client
        test_client.portal.call(engine.dispose)

    app.dependency_overrides.clear()


@pytest.fixture
def seed(client, session_maker) -> SeedData:
    return client.portal.call(_seed, session_maker)


@pytest.fixture
def run_db(client, session_maker):
    """Run `async fn(session)` against the test database and return its result."""

    def _run(fn):
        async def _call():
            async with session_maker() as session:
                return await fn(session)

        return client.portal.call(_call)

    return _run


@pytest.fixture
def add_inspection(run_db, seed):
    """Insert an inspection directly, with an explicit age."""

    def _add(
        *,
        chassis: Optional[str] = None,
        severity: str = "High",
        status: str = "Pending",
        age: timedelta = timedelta(0),
        leakage_type_id: Optional[UUID] = None,
        tester_id: Optional[UUID] = None,
    ) -> UUID:
        async def _insert(session):
            machine = Machine(chassis_number=chassis or f"CH-{uuid4().hex[:8]}", model_id=seed.model_id)
            session.add(machine)
            await session.flush()
            created = utcnow() - age
            row = InspectionRecord(
                machine_id=machine.id,
                tester_id=tester_id or seed.tester_id,
                leakage_type_id=leakage_type_id,
                severity=severity,
                status=status,
                created_at=created,
                updated_at=created,
            )
            session.add(row)
            await session.commit()
            return row.id

        return run_db(_insert)

    return _add


def auth_headers(user_id: UUID, role: Optional[str]) -> dict:
    token = create_access_token(subject=str(user_id), role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_headers():
    return auth_headers


@pytest.fixture
def admin_headers(seed):
    return auth_headers(seed.admin_id, "admin")


@pytest.fixture
def tester_headers(seed):
    return auth_headers(seed.tester_id, "tester")


@pytest.fixture
def repairman_headers(seed):
    return auth_headers(seed.repairman_id, "repairman")
