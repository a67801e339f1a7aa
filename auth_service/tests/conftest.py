"""
Shared fixtures for the auth service tests.

Each test gets its own SQLite database file with the schema created and
the default roles seeded.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from auth_service.base_microservice import Base, ServiceConfig
from auth_service.main import create_app
from auth_service.auth.jwt import TokenIssuer
from auth_service.auth.repository import seed_roles

TEST_JWT_KEY = "test-secret-key-for-hs256-signing-0123"
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}"


@pytest.fixture
def config(database_url):
    return ServiceConfig(
        database_url=database_url,
        jwt_key=TEST_JWT_KEY,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
    )


@pytest.fixture
def token_issuer():
    return TokenIssuer(TEST_JWT_KEY)


@pytest_asyncio.fixture
async def engine(database_url):
    engine = create_async_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)() as session:
        await seed_roles(session)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(config, engine):
    return create_app(config, engine=engine)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(base_url="http://test", transport=transport) as ac:
        yield ac
