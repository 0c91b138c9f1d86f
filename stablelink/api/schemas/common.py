"""
Common Pydantic schemas for API responses.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    service: str = "stablelink-backend"


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class ReminderResponse(BaseModel):
    ok: bool = True
    message: str


class IndexerStatusResponse(BaseModel):
    """Poll scheduler and indexer state."""
    status: str
    running: bool = False
    interval: Optional[float] = None
    stats: Dict[str, Any] = {}
    indexer: Optional[Dict[str, Any]] = None
    checked_at: datetime
