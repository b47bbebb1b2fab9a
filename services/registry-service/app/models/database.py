from sqlalchemy import Column, String, Integer, Float
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker
from tenacity import retry, stop_after_attempt, wait_fixed, before_sleep_log
from contextlib import asynccontextmanager
from typing import Dict
import logging
import uuid
import structlog

from ..core.config import settings
from .records import KINDS, FieldType, RecordKind

logger = structlog.get_logger()

Base = declarative_base()

# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    future=True
)

# Create async session factory
AsyncSessionLocal = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


def generate_record_id() -> str:
    """Store-generated identity for a new record."""
    return uuid.uuid4().hex


def build_record_model(kind: RecordKind):
    """
    Build the declarative model backing one kind's collection.

    Every model carries an insertion sequence (primary key, used for natural
    ordering), the generated ``_id`` identity and one nullable column per
    declared field. No column is unique and no foreign keys exist between
    kinds.
    """
    attributes = {
        "__tablename__": kind.collection,
        "__doc__": f"{kind.name} collection.",
        "seq": Column(Integer, primary_key=True, autoincrement=True),
        "record_id": Column("_id", String(32), nullable=False, index=True, default=generate_record_id),
    }
    for spec in kind.fields:
        column_type = Float if spec.type is FieldType.NUMBER else String
        attributes[spec.name] = Column(spec.name, column_type, nullable=True)

    return type(kind.name, (Base,), attributes)


RECORD_MODELS: Dict[str, type] = {kind.name: build_record_model(kind) for kind in KINDS}


def get_record_model(kind: RecordKind):
    """Return the declarative model for a kind."""
    return RECORD_MODELS[kind.name]


@retry(
    stop=stop_after_attempt(settings.MAX_RETRY_ATTEMPTS),
    wait=wait_fixed(settings.RETRY_DELAY),
    before_sleep=before_sleep_log(logging.getLogger(__name__), logging.WARNING),
    reraise=True
)
async def init_database(bind=None):
    """Initialize database tables."""
    async with (bind or engine).begin() as conn:
        # Create one table per record kind
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized", collections=[kind.collection for kind in KINDS])


@asynccontextmanager
async def get_db_session() -> AsyncSession:
    """Get database session context manager."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# Dependency for FastAPI
async def get_db() -> AsyncSession:
    """Database dependency for FastAPI."""
    async with get_db_session() as session:
        yield session
