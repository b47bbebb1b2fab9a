"""
Record kinds, database models and Pydantic schemas for the registry service.
"""

from .records import (
    Record,
    CastError,
    FieldType,
    FieldSpec,
    RecordKind,
    KINDS,
    get_kind
)
from .database import Base, RECORD_MODELS, get_db, get_db_session, get_record_model, init_database
from .schemas import (
    MessageResponse,
    ErrorResponse,
    HealthCheckResponse,
    MetricsResponse
)

__all__ = [
    "Record",
    "CastError",
    "FieldType",
    "FieldSpec",
    "RecordKind",
    "KINDS",
    "get_kind",
    "Base",
    "RECORD_MODELS",
    "get_db",
    "get_db_session",
    "get_record_model",
    "init_database",
    "MessageResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "MetricsResponse"
]
