"""Schemas for the probing-engine boundary."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class ProbeResult(BaseModel):
    """Result of a single check from the probing engine."""
    monitor_id: int
    status: str = Field(..., pattern="^(up|down)$")
    response_time: int = Field(default=0, ge=0)  # ms
    message: Optional[str] = None
    created_at: Optional[datetime] = None  # defaults to receipt time
    certificate_expiry: Optional[datetime] = None


class ProbeReport(BaseModel):
    """Batch of results reported by the probing engine."""
    results: List[ProbeResult]
