"""
Pytest configuration and fixtures for the furniture recolor API tests.
"""
import io
import os
import tempfile
from typing import AsyncGenerator
from unittest.mock import MagicMock

# Configure settings before any application module is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("UPLOAD_PATH", tempfile.mkdtemp(prefix="recolor-uploads-"))
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("REPLICATE_API_TOKEN", "")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.database import create_tables, enable_sqlite_foreign_keys  # noqa: E402
from services.ledger_service import ProjectLedger  # noqa: E402
from services.recolor_service import RecolorOrchestrator  # noqa: E402
from services.replicate_service import ReplicateGateway  # noqa: E402
from services.storage_service import UploadStore  # noqa: E402


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test; StaticPool keeps a single shared connection"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def ledger(db_session):
    return ProjectLedger(db_session)


@pytest.fixture
def upload_store(tmp_path):
    return UploadStore(upload_dir=str(tmp_path / "uploads"), base_url="http://localhost:8000")


@pytest.fixture
def gateway():
    """Gateway with the Replicate client replaced by a mock"""
    gateway = ReplicateGateway(api_token="r8_test_token")
    gateway._client = MagicMock()
    return gateway


@pytest.fixture
def orchestrator(gateway):
    return RecolorOrchestrator(gateway)


@pytest.fixture
def png_bytes():
    """A small 64x48 PNG"""
    img = Image.new("RGB", (64, 48), color="brown")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
async def client(session_factory, upload_store, orchestrator) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the real app with test services and database"""
    from core.database import get_db
    from main import app

    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.state.upload_store = upload_store
    app.state.orchestrator = orchestrator
    app.dependency_overrides[get_db] = _get_test_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()
