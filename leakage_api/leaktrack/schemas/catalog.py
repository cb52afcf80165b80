from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ProductLineRead(BaseModel):
    """Product line read model."""
    id: UUID = Field(..., description="Product line ID")
    code: str = Field(..., description="Short code, e.g. EXC")
    name: str = Field(..., description="Display name")

    class Config:
        from_attributes = True


class MachineModelRead(BaseModel):
    """Machine model read model."""
    id: UUID = Field(..., description="Model ID")
    product_line_id: UUID = Field(..., description="Owning product line")
    code: str = Field(...)
    name: str = Field(...)

    class Config:
        from_attributes = True


class MachineModelDetail(MachineModelRead):
    """Machine model with its product line embedded."""
    product_line: ProductLineRead


class LeakageTypeRead(BaseModel):
    """Leakage type read model."""
    id: UUID = Field(..., description="Leakage type ID")
    product_line_id: UUID = Field(...)
    code: str = Field(...)
    name: str = Field(...)
    description: Optional[str] = Field(None)

    class Config:
        from_attributes = True


class MachineRead(BaseModel):
    """Machine with model and product line embedded."""
    id: UUID = Field(..., description="Machine ID")
    chassis_number: str = Field(..., description="Chassis number as printed on the barcode")
    model_id: UUID = Field(...)
    model: MachineModelDetail

    class Config:
        from_attributes = True
        protected_namespaces = ()
