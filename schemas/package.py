from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, validator

from models.package import PackageStatus

class PackageCreate(BaseModel):
    order_reference: str = Field(..., min_length=1, max_length=255, description="Unique external order reference")
    driver_code: Optional[str] = Field(None, max_length=255, description="Code of the driver collecting the package")

    @validator('order_reference')
    def validate_order_reference(cls, v):
        if not v or not v.strip():
            raise ValueError('Order reference cannot be empty')
        return v

    @validator('driver_code')
    def validate_driver_code(cls, v):
        if v is not None:
            return v.strip() or None
        return v

class PackageStatusUpdate(BaseModel):
    status: PackageStatus = Field(..., description="Requested new status")

class PackageResponse(BaseModel):
    id: str
    order_reference: str = Field(..., validation_alias="order_ref")
    driver_code: Optional[str] = None
    status: PackageStatus
    created_at: datetime
    updated_at: datetime
    picked_up_at: Optional[datetime] = None
    handed_over_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None
    version: int

    class Config:
        from_attributes = True
        populate_by_name = True

class PackageStats(BaseModel):
    total: int = 0
    waiting: int = 0
    picked: int = 0
    handed_over: int = 0
    expired: int = 0

class SweepFailure(BaseModel):
    package_id: str
    error_code: str
    message: str

class SweepResult(BaseModel):
    scanned: int = 0
    expired_ids: List[str] = Field(default_factory=list)
    failures: List[SweepFailure] = Field(default_factory=list)

    @property
    def expired_count(self) -> int:
        return len(self.expired_ids)
