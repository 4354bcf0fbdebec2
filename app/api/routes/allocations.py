"""
Room Allocation Routes
Landlords allocate and release students; students check and leave their room.
"""
from fastapi import APIRouter, Depends
from typing import List, Optional
from uuid import UUID
import logging

from app.core.deps import get_allocation_engine, get_current_user, raise_for_error, require_user_type
from app.models.user import User, UserType
from app.schemas.allocation import (
    AllocateRequest, UnallocateRequest, LeaveRequest,
    AllocationResponse, ReleaseResponse, CheckAllocationResponse,
    StudentAllocationResponse, LandlordOccupantResponse,
)
from app.services.allocation_engine import AllocationEngine

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/allocate", response_model=AllocationResponse)
def allocate_room(
    request: AllocateRequest,
    engine: AllocationEngine = Depends(get_allocation_engine),
    current_user: User = Depends(require_user_type(UserType.LANDLORD))
):
    """Allocate a student to a room in one of the landlord's properties"""
    logger.info(
        f"[ALLOCATE] Request: property={request.property_id} user={request.user_id} "
        f"room={request.room_number} landlord={current_user.id}"
    )
    result = engine.allocate(
        request.property_id,
        request.user_id,
        request.room_number,
        current_user.id,
        number_of_rooms=request.number_of_rooms,
    )
    if not result.ok:
        raise_for_error(result.error)
    return {"message": "Room allocated successfully", "data": result.data}


@router.post("/unallocate", response_model=ReleaseResponse)
def unallocate_room(
    request: UnallocateRequest,
    engine: AllocationEngine = Depends(get_allocation_engine),
    current_user: User = Depends(require_user_type(UserType.LANDLORD))
):
    """Remove a student's room allocation"""
    result = engine.unallocate(request.property_id, request.user_id, current_user.id)
    if not result.ok:
        raise_for_error(result.error)
    return {"message": "Room allocation removed successfully", "data": result.data}


@router.post("/leave", response_model=ReleaseResponse)
def leave_room(
    request: LeaveRequest,
    engine: AllocationEngine = Depends(get_allocation_engine),
    current_user: User = Depends(require_user_type(UserType.STUDENT))
):
    """Student leaves their current room"""
    result = engine.leave(request.occupant_id, current_user.id)
    if not result.ok:
        raise_for_error(result.error)
    return {"message": "Successfully left room", "data": result.data}


@router.get("/check", response_model=CheckAllocationResponse)
def check_allocation(
    property_id: Optional[str] = None,
    user_id: Optional[str] = None,
    engine: AllocationEngine = Depends(get_allocation_engine),
    current_user: User = Depends(get_current_user)
):
    """Whether a user currently occupies a property"""
    return engine.check_allocation(property_id, user_id).data


@router.get("/student/{student_id}", response_model=StudentAllocationResponse)
def get_student_allocation(
    student_id: UUID,
    engine: AllocationEngine = Depends(get_allocation_engine),
    current_user: User = Depends(get_current_user)
):
    """A student's active room allocation"""
    result = engine.student_allocation(student_id)
    if not result.ok:
        raise_for_error(result.error)
    return result.data


@router.get("/occupants", response_model=List[LandlordOccupantResponse])
def list_occupants(
    engine: AllocationEngine = Depends(get_allocation_engine),
    current_user: User = Depends(require_user_type(UserType.LANDLORD))
):
    """Active occupants across the landlord's properties"""
    return engine.landlord_occupants(current_user.id).data
