from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class StatusCounts(BaseModel):
    """Inspections bucketed by stored status (exact match)."""
    pending: int = Field(0, description="status == 'Pending'")
    completed: int = Field(0, description="status == 'Completed'")


class LeakageFreeCounts(BaseModel):
    """Inspections with severity 'None' inside each reporting window."""
    today: int = Field(0, description="Since local midnight")
    week: int = Field(0, description="Rolling week window")
    month: int = Field(0, description="Rolling month window")


class LeakageFrequency(BaseModel):
    """Occurrences of one leakage type."""
    leakage_type_id: UUID
    code: Optional[str] = None
    name: Optional[str] = None
    count: int


class InspectionSummary(BaseModel):
    """Aggregate view over one fetched batch of inspections."""
    total: int = Field(0, description="Number of inspections aggregated")
    status_counts: StatusCounts = Field(default_factory=StatusCounts)
    leakage_free_counts: LeakageFreeCounts = Field(default_factory=LeakageFreeCounts)
    delayed_count: int = Field(0, description="Pending and older than the delay threshold")
    top_leakages: List[LeakageFrequency] = Field(default_factory=list)
