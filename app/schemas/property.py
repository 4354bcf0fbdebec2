from pydantic import BaseModel, Field, model_validator
from uuid import UUID
from datetime import datetime
from typing import Optional

from app.models.property import PropertyStatus


class AllocationSummaryResponse(BaseModel):
    total_rooms: int
    occupied_rooms: int
    available_rooms: int
    price_per_room: float
    is_shared: bool
    total_occupants: int
    max_occupants: int
    remaining_occupant_slots: int

    class Config:
        from_attributes = True


class PropertyBase(BaseModel):
    location: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: float = Field(..., gt=0)
    bedrooms: int = Field(..., ge=1)
    bathrooms: Optional[int] = Field(None, ge=0)
    room_sharing: bool = False
    tenants_per_room: int = Field(1, ge=1)
    gender: str = "ANY"
    religion: str = "ANY"


class PropertyCreate(PropertyBase):
    @model_validator(mode="after")
    def normalise_sharing(self):
        if not self.room_sharing:
            self.tenants_per_room = 1
        self.gender = self.gender.upper()
        self.religion = self.religion.upper()
        return self


class PropertyUpdate(BaseModel):
    """Descriptive and capacity fields; occupancy counters are not editable."""
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    bedrooms: Optional[int] = Field(None, ge=1)
    bathrooms: Optional[int] = Field(None, ge=0)
    room_sharing: Optional[bool] = None
    tenants_per_room: Optional[int] = Field(None, ge=1)
    gender: Optional[str] = None
    religion: Optional[str] = None
    status: Optional[PropertyStatus] = None


class PropertyResponse(PropertyBase):
    id: UUID
    owner_id: UUID
    current_occupants: int
    status: PropertyStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PropertyDetailResponse(PropertyResponse):
    allocation: AllocationSummaryResponse
