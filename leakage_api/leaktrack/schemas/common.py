from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

# Stored vocabularies. "Delayed" only appears on legacy rows.
Severity = Literal["None", "Low", "Medium", "High"]
InspectionStatus = Literal["Pending", "Completed", "Delayed"]
RepairStatus = Literal["Repairable", "Not Repairable"]


class MessageResponse(BaseModel):
    """Plain acknowledgement (health, logout)."""
    message: str = Field(..., description="Human readable message")
    details: Optional[dict] = Field(default=None, description="Optional extra data")


class ErrorInfo(BaseModel):
    type: str = Field(..., description="Error kind: store_error, not_found, role_error, http_error, ...")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(default=None, description="Lookup context or validation issues")


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    """Error envelope returned by every exception handler, tagged with the request's correlation id."""
    status: int = Field(..., description="HTTP status code")
    error: ErrorInfo = Field(..., description="Error details")
    correlation_id: Optional[str] = Field(default=None, description="X-Correlation-ID of the failed request")
    path: Optional[str] = Field(default=None, description="Request path")
    method: Optional[str] = Field(default=None, description="HTTP method")
    timestamp: datetime = Field(..., description="Error timestamp (UTC)")
