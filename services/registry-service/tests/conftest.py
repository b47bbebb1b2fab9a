import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
import os
import sys

# Add the app directory to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)

from app.main import app
from app.models.database import get_db, init_database


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create a test database engine backed by a throwaway SQLite file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}",
        echo=False,
        future=True
    )

    await init_database(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine):
    """Session factory bound to the test engine."""
    return sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest_asyncio.fixture
async def test_session(test_session_factory):
    """Create test database session."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def override_db(test_session_factory):
    """Serve every request from its own session on the test database."""
    async def _get_test_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    yield test_session_factory
    app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def client(override_db):
    """HTTP client talking to the app in-process."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def broken_session():
    """Session whose every database round trip fails."""
    fault = OperationalError("SELECT 1", {}, Exception("connection refused"))
    session = MagicMock()
    session.execute = AsyncMock(side_effect=fault)
    session.commit = AsyncMock(side_effect=fault)
    session.rollback = AsyncMock()
    return session


@pytest_asyncio.fixture
async def broken_client(broken_session):
    """HTTP client for an app whose store is unreachable."""
    async def _get_broken_db():
        yield broken_session

    app.dependency_overrides[get_db] = _get_broken_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def sample_records():
    """One plausible record per kind, keyed by URL slug."""
    return {
        "blood-types": {
            "Blood_Type_ID": "BT1",
            "Name": "O+"
        },
        "hospitals": {
            "Hospital_ID": "H001",
            "Name": "Douala General Hospital",
            "Address": "Bonanjo, Douala",
            "Contact": "+237123456789"
        },
        "donors": {
            "Donor_ID": "D001",
            "Name": "Amina Njoya",
            "Contact": "+237987654321",
            "Age": 30,
            "Blood_Type": "A+",
            "Card_ID": "CARD-001"
        },
        "recipients": {
            "Recipient_ID": "R001",
            "Name": "Paul Mbarga",
            "Contact": "+237555000111",
            "Age": 54,
            "Blood_Type": "O-",
            "Card_ID": "CARD-777"
        },
        "donor-transactions": {
            "Transaction_ID": "DT001",
            "Donor_ID": "D001",
            "Hospital_ID": "H001",
            "Date": "2024-01-15",
            "Confirmation_Code": "CONF-9A2",
            "Health_Status": "Fit"
        },
        "recipient-transactions": {
            "Transaction_ID": "RT001",
            "Recipient_ID": "R001",
            "Hospital_ID": "H001",
            "Date": "2024-01-16",
            "Blood_Type": "O-"
        }
    }
