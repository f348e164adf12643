import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from splitpal.core.dependencies import get_db
from splitpal.db.init_db import init_models
from splitpal.main import app


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """Return an API client whose requests hit the in-memory database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def trip(client):
    """Create a group with members Asha, Bala and Chitra; return their ids."""
    res = await client.post("/api/v1/groups/", json={"name": "Goa Trip"})
    assert res.status_code == 201
    group_id = res.json()["id"]

    ids = {"group": group_id}
    for name, upi in (("Asha", "asha@okbank"), ("Bala", None), ("Chitra", "chitra@upi")):
        res = await client.post(
            f"/api/v1/groups/{group_id}/members",
            json={"name": name, "upi_id": upi},
        )
        assert res.status_code == 201
        ids[name] = res.json()["id"]

    return ids
