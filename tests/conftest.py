"""Shared test fixtures — async DB, client, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Before any import touches pydantic-settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import uuid
from datetime import date, datetime, timezone
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from hrcore.config import settings
from hrcore.database import Base, get_db
from hrcore.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import hrcore.models  # noqa: F401


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from hrcore.common.rate_limit import limiter

    limiter.reset()
    yield


@pytest.fixture(autouse=True)
def _document_dir(tmp_path, monkeypatch):
    """Payslip documents go to a per-test temp directory."""
    monkeypatch.setattr(settings, "DOCUMENT_DIR", str(tmp_path / "payslips"))
    return tmp_path / "payslips"


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

_counter = iter(range(101, 1_000_000))


def _make_employee(
    *,
    employee_code: str | None = None,
    name: str = "Asha Verma",
    email: str | None = None,
    designation: str = "Software Engineer",
    role: str = "DEV",
    joining_date: date = date(2024, 1, 15),
    current_ctc: int = 1_200_000,
    status: str = "Active",
    casual_leave: int = 10,
    sick_leave: int = 5,
    earned_leave: int = 7,
) -> dict:
    number = next(_counter)
    return dict(
        id=uuid.uuid4(),
        employee_code=employee_code or f"VT{number:06d}",
        name=name,
        email=email or f"employee{number}@example.com",
        phone="+919876543210",
        designation=designation,
        department="Engineering",
        role=role,
        joining_date=joining_date,
        current_ctc=current_ctc,
        status=status,
        casual_leave=casual_leave,
        sick_leave=sick_leave,
        earned_leave=earned_leave,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def seed_employee(db):
    """Factory fixture: ``await seed_employee(sick_leave=2, ...)`` inserts an Employee."""
    from hrcore.common.constants import EmploymentStatus
    from hrcore.employees.models import Employee

    async def _seed(**overrides) -> Employee:
        data = _make_employee(**overrides)
        data["status"] = EmploymentStatus(data["status"])
        employee = Employee(**data)
        db.add(employee)
        await db.flush()
        return employee

    return _seed


@pytest.fixture
async def test_employee(seed_employee):
    """An Active employee with the default 10/5/7 balance and CTC 1,200,000."""
    return await seed_employee()
