import json
import uuid
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import Settings
from app.models.base import Base
# Import all models so they register with Base.metadata for create_all
import app.models  # noqa: F401


def make_settings(**overrides) -> Settings:
    values = {
        "anthropic_api_key": "test-key",
        "claude_model": "claude-sonnet-4-20250514",
        "claude_max_tokens": 4096,
        "database_url": "sqlite+aiosqlite:///test.db",
        "imap_host": "imap.example.com",
        "imap_user": "inbox@example.com",
        "imap_password": "secret",
        "owner_user_id": str(uuid.uuid4()),
        "intake_endpoint_token": "",
        "compensate_partial_writes": False,
    }
    values.update(overrides)
    return Settings(**values)


def make_claude_response(data: dict | str) -> MagicMock:
    """Create a mock Anthropic message response."""
    mock_content = MagicMock()
    mock_content.text = data if isinstance(data, str) else json.dumps(data)
    mock_response = MagicMock()
    mock_response.content = [mock_content]
    return mock_response


@pytest.fixture
def mock_settings() -> Settings:
    return make_settings()


@pytest.fixture
async def test_engine(tmp_path):
    # One SQLite file per test: the persistence chain commits every row
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine):
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(db_session):
    from app.database import get_db
    from app.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


SAMPLE_EMAIL = (
    b"From: Jane Buyer <Jane.Buyer@Acme.example>\r\n"
    b"To: sales@example.com\r\n"
    b"Subject: RE: Fwd: Quote request\r\n"
    b"Message-ID: <abc123@acme.example>\r\n"
    b"Date: Tue, 14 Oct 2025 09:30:00 +0200\r\n"
    b"Content-Type: text/plain; charset=utf-8\r\n"
    b"\r\n"
    b"Hello,\r\n"
    b"please quote 5 pcs ABC Co XY-100 and 2 pcs Zeta ZT_200.\r\n"
    b"Ship to Acme Warehouse, 1 Dock Road.\r\n"
)


@pytest.fixture
def sample_email() -> bytes:
    return SAMPLE_EMAIL


SAMPLE_AI_EXTRACTION = {
    "customer": {
        "name": "Acme",
        "country": "Netherlands",
        "billing_address": "1 Main Street, Amsterdam",
        "contact_person": "Jane Buyer",
        "contact_phone": None,
        "contact_email": "jane.buyer@acme.example",
    },
    "delivery": {
        "company_name": "Acme Warehouse",
        "address": "1 Dock Road",
        "contact_person": None,
        "phone": "",
        "email": None,
    },
    "items": [
        {"brand": "abc co", "catalog_number": "xy-100", "quantity": "5"},
        {"brand": "Zeta", "catalog_number": "ZT_200", "quantity": 2},
        {"brand": "Zeta", "catalog_number": "", "quantity": 3},
    ],
}


@pytest.fixture
def sample_ai_extraction() -> dict:
    return json.loads(json.dumps(SAMPLE_AI_EXTRACTION))
