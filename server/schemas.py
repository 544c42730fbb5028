"""Pydantic schemas for transfer endpoint responses."""

from typing import Optional
from pydantic import BaseModel


class UploadReport(BaseModel):
    """Response model for a completed upload."""
    bytes_received: int
    elapsed_seconds: float
    rate: Optional[float] = None


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers."""
    detail: str
    code: str
