"""
Test infrastructure for the Article API.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- A fresh engine is built for every test (tables created before, engine
  disposed after), so no connection outlives the event loop it was
  opened on and every test starts from an empty table.
- The app is built with ``create_app(engine=...)``, which wires the store
  and handler to the test engine instead of ``DATABASE_URL``.
"""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from article_api.config import Settings
from article_api.database import Base, create_sessionmaker
from article_api.main import create_app
from article_api.middleware import install_query_counter
from article_api.services.article_store import ArticleStore

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def app_settings() -> Settings:
    return Settings(DATABASE_URL=TEST_DATABASE_URL, REQUEST_TIMEOUT_SECONDS=5.0)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine() -> AsyncEngine:
    """Yield an engine over a freshly created schema."""
    engine_test = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    install_query_counter(engine_test)
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine_test
    await engine_test.dispose()


@pytest.fixture
def store(engine: AsyncEngine) -> ArticleStore:
    """An ArticleStore for tests that exercise persistence directly."""
    return ArticleStore(create_sessionmaker(engine))


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture
def app(app_settings: Settings, engine: AsyncEngine):
    return create_app(app_settings, engine=engine)


@pytest_asyncio.fixture
async def async_client(app) -> AsyncClient:
    """
    Yield an httpx.AsyncClient wired to the FastAPI app via ASGITransport.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
