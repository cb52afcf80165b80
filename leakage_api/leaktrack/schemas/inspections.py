from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from leaktrack.schemas.catalog import LeakageTypeRead, MachineRead
from leaktrack.schemas.common import RepairStatus, Severity
from leaktrack.schemas.stats import InspectionSummary, StatusCounts


class InspectionCreate(BaseModel):
    """
    Tester submission.

    The machine is looked up by (chassis_number, model_id) and created when
    it has not been seen before.
    """
    chassis_number: str = Field(..., min_length=1, description="Scanned chassis number")
    model_id: UUID = Field(..., description="Model the chassis belongs to")
    leakage_type_id: Optional[UUID] = Field(None, description="Leakage category; usually empty when severity is 'None'")
    severity: Severity = Field("None")
    remarks: Optional[str] = Field(None)

    class Config:
        protected_namespaces = ()


class PersonRef(BaseModel):
    """Display identity embedded in other records."""
    id: UUID
    full_name: str

    class Config:
        from_attributes = True


class RepairRead(BaseModel):
    """Repair record read model."""
    id: UUID = Field(..., description="Repair id")
    inspection_id: UUID = Field(...)
    repairman: PersonRef
    repair_status: RepairStatus
    notes: Optional[str] = Field(None)
    photo_url: Optional[str] = Field(None)
    started_at: Optional[datetime] = Field(None)
    completed_at: Optional[datetime] = Field(None)
    created_at: datetime = Field(..., description="Created at")

    class Config:
        from_attributes = True


class InspectionRead(BaseModel):
    """Inspection with machine/model/product line, leakage type, tester and repairs embedded."""
    id: UUID = Field(..., description="Inspection id")
    machine: MachineRead
    leakage_type: Optional[LeakageTypeRead] = Field(None)
    tester: PersonRef
    severity: Severity
    status: str = Field(..., description="Stored status: Pending/Completed (Delayed on legacy rows)")
    is_delayed: bool = Field(False, description="Pending and older than the delay threshold")
    remarks: Optional[str] = Field(None)
    repairs: List[RepairRead] = Field(default_factory=list)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True

    @classmethod
    def from_record(cls, record: Any, *, delayed: bool) -> "InspectionRead":
        return cls.model_validate(record).model_copy(update={"is_delayed": delayed})


class RepairWithInspection(RepairRead):
    """Repair joined with the inspection it resolved ("my repairs")."""
    inspection: InspectionRead


class DashboardRead(BaseModel):
    """Admin dashboard: full summary over the fetched batch plus the rows themselves."""
    generated_at: datetime
    delay_threshold_hours: int
    summary: InspectionSummary
    recent: List[InspectionRead]


class OverviewRead(BaseModel):
    """Admin overview: status/delay counters plus the most recent inspections."""
    generated_at: datetime
    delay_threshold_hours: int
    status_counts: StatusCounts
    delayed_count: int
    recent: List[InspectionRead]
