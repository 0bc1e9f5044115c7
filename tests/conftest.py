import os
from datetime import date
from typing import AsyncGenerator, Awaitable, Callable, Optional

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core import models  # noqa: E402,F401  (registers tables on Base.metadata)
from app.db.session import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test; overrides the FastAPI session dependency."""
    # StaticPool: every session shares the one connection that holds the in-memory DB
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def current_year() -> int:
    return date.today().year


@pytest.fixture()
def create_student(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Create a student through the API and return the response data."""

    async def _create(
        full_name: str,
        gender: str = "L",
        class_name: str = "7A",
        guardian_name: Optional[str] = None,
        birth_date: Optional[str] = None,
        **extra,
    ) -> dict:
        payload = {
            "full_name": full_name,
            "gender": gender,
            "class_name": class_name,
            "guardian_name": guardian_name,
            "birth_date": birth_date,
            **extra,
        }
        response = await client.post("/api/v1/students", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture()
def create_batch(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Create a billing batch through the API and return the response data."""

    async def _create(month: int, year: int, **components) -> dict:
        response = await client.post(
            "/api/v1/billing/batch", json={"month": month, "year": year, **components}
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
