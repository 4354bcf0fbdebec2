"""
Allocation Request/Response Schemas
"""
from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from app.models.occupant import OccupantStatus
from app.schemas.property import PropertyResponse, AllocationSummaryResponse
from app.schemas.user import UserSummaryResponse


class AllocateRequest(BaseModel):
    property_id: UUID
    user_id: UUID
    room_number: int
    number_of_rooms: int = Field(1, ge=1)


class UnallocateRequest(BaseModel):
    property_id: UUID
    user_id: UUID


class LeaveRequest(BaseModel):
    occupant_id: UUID


class OccupantResponse(BaseModel):
    id: UUID
    property_id: UUID
    user_id: UUID
    room_number: int
    number_of_rooms: int
    status: OccupantStatus
    start_date: datetime
    end_date: Optional[datetime] = None
    total_price: float
    user: Optional[UserSummaryResponse] = None

    class Config:
        from_attributes = True


class PropertyBrief(BaseModel):
    id: UUID
    location: str

    class Config:
        from_attributes = True


class LandlordOccupantResponse(OccupantResponse):
    property: PropertyBrief


class AllocationData(BaseModel):
    occupant: OccupantResponse
    property: PropertyResponse
    allocation: AllocationSummaryResponse


class AllocationResponse(BaseModel):
    message: str
    data: AllocationData


class ReleaseData(BaseModel):
    occupant: OccupantResponse
    property: PropertyResponse


class ReleaseResponse(BaseModel):
    message: str
    data: ReleaseData


class CheckAllocationResponse(BaseModel):
    is_active: bool
    occupant: Optional[OccupantResponse] = None


class StudentAllocationResponse(BaseModel):
    occupant: OccupantResponse
    property: PropertyResponse


class RoomOccupant(BaseModel):
    id: UUID
    user_id: UUID
    name: Optional[str] = None
    gender: Optional[str] = None
    religion: Optional[str] = None
    number_of_rooms: int = 1

    class Config:
        from_attributes = True


class RoomResponse(BaseModel):
    room_number: int
    occupants: List[RoomOccupant]
    total_occupants: int
    capacity: int
    available: bool
    is_full: bool


class RoomsSummary(BaseModel):
    total_rooms: int
    total_capacity: int
    total_occupants: int
    available_spaces: int
    available_rooms: int
    full_rooms: int
    partially_occupied_rooms: int
    empty_rooms: int
    is_room_sharing: bool
    tenants_per_room: int
    gender: str
    religion: str


class RoomsOverviewResponse(BaseModel):
    rooms: List[RoomResponse]
    summary: RoomsSummary

