import os

# Must be set before vertragsdb.config is imported.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_BACKEND", "local")

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vertragsdb.main import app
from vertragsdb.database import Base, configure_sqlite, get_db
from vertragsdb.models.contract import Contract
from vertragsdb.models.user import Role, User
from vertragsdb.services.auth_service import create_access_token, hash_password
from vertragsdb.services.storage import LocalStorage, get_storage


@pytest.fixture
def admin_token():
    return create_access_token(user_id=1, username="admin", role=Role.ADMIN)


@pytest.fixture
def viewer_token():
    return create_access_token(user_id=2, username="viewer", role=Role.VIEWER)


@pytest.fixture
def auth_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def viewer_headers(viewer_token):
    return {"Authorization": f"Bearer {viewer_token}"}


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "uploads"))


@pytest.fixture
async def client(session_factory, storage):
    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_storage] = lambda: storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def seed_contract(session_factory):
    """Insert a contract directly (bypassing the API) and return its id."""
    counter = {"n": 0}

    async def _seed(**overrides) -> int:
        counter["n"] += 1
        fields = {
            "contract_number": f"T{counter['n']:04d}",
            "title": f"Contract {counter['n']}",
            "partner": "Acme GmbH",
            "category": "IT",
            "contract_type": "individual",
            "valid_from": date(2024, 1, 1),
            "is_terminated": False,
        }
        fields.update(overrides)
        async with session_factory() as session:
            contract = Contract(**fields)
            session.add(contract)
            await session.commit()
            return contract.id

    return _seed


@pytest.fixture
def seed_user(session_factory):
    async def _seed(username: str, password: str = "Secret123!", role: Role = Role.VIEWER) -> int:
        async with session_factory() as session:
            user = User(username=username, password_hash=hash_password(password), role=role.value)
            session.add(user)
            await session.commit()
            return user.id

    return _seed


@pytest.fixture
def fetch_contract(session_factory):
    async def _fetch(contract_id: int) -> Contract:
        async with session_factory() as session:
            return await session.get(Contract, contract_id)

    return _fetch
