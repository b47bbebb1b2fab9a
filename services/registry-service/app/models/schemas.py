from pydantic import BaseModel, Field
from typing import List, Dict
from datetime import datetime


class MessageResponse(BaseModel):
    """Response returned when a record is stored."""
    message: str = Field(..., description="Success message")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: float = Field(..., description="Error timestamp (epoch seconds)")


class HealthCheckResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Health status")
    timestamp: datetime = Field(default_factory=datetime.now, description="Check timestamp")
    version: str = Field(..., description="Service version")
    database_status: str = Field(..., description="Database connection status")
    uptime_seconds: float = Field(..., description="Service uptime in seconds")


class MetricsResponse(BaseModel):
    """Record counts per kind."""
    total_records: int = Field(..., description="Records across all kinds")
    records_by_kind: Dict[str, int] = Field(..., description="Record count per kind")
    errors: List[str] = Field(default_factory=list, description="Kinds that could not be counted")
    last_updated: datetime = Field(default_factory=datetime.now, description="Last update timestamp")

