from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from app.database import get_db
from app.core.deps import get_allocation_engine, get_current_user, raise_for_error, require_user_type
from app.models.user import User, UserType
from app.models.property import Property, PropertyStatus
from app.schemas.property import (
    PropertyCreate, PropertyResponse, PropertyUpdate, PropertyDetailResponse,
)
from app.schemas.allocation import RoomsOverviewResponse
from app.services.allocation_engine import AllocationEngine
from app.services.allocation_rules import check_capacity_change
from app.services.persistence import SqlAlchemyGateway, occupant_state

router = APIRouter()
logger = logging.getLogger(__name__)


def _owned_property(db: Session, property_id: UUID, owner: User) -> Property:
    prop = db.get(Property, property_id)
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    if prop.owner_id != owner.id:
        raise HTTPException(status_code=403, detail="You are not authorized to manage this property")
    return prop


@router.post("/", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
def create_property(
    property_in: PropertyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_type(UserType.LANDLORD))
):
    """Create a new listing"""
    prop = Property(**property_in.model_dump(), owner_id=current_user.id)
    db.add(prop)
    db.commit()
    db.refresh(prop)
    logger.info(f"[PROPERTY] Landlord {current_user.id} listed property {prop.id}")
    return prop


@router.get("/", response_model=List[PropertyResponse])
def list_properties(
    status_filter: Optional[PropertyStatus] = Query(None, alias="status"),
    room_sharing: Optional[bool] = None,
    gender: Optional[str] = None,
    max_price: Optional[float] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """Browse listings (public)"""
    stmt = select(Property)
    if status_filter is not None:
        stmt = stmt.where(Property.status == status_filter)
    if room_sharing is not None:
        stmt = stmt.where(Property.room_sharing == room_sharing)
    if gender:
        stmt = stmt.where(Property.gender.in_([gender.upper(), "ANY"]))
    if max_price is not None:
        stmt = stmt.where(Property.price <= max_price)
    stmt = stmt.order_by(Property.created_at.desc()).offset(skip).limit(limit)
    return db.execute(stmt).scalars().all()


@router.get("/mine", response_model=List[PropertyResponse])
def list_my_properties(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_type(UserType.LANDLORD))
):
    """Get all properties for current landlord"""
    return db.execute(
        select(Property)
        .where(Property.owner_id == current_user.id)
        .order_by(Property.created_at.desc())
    ).scalars().all()


@router.get("/{property_id}", response_model=PropertyDetailResponse)
def get_property(
    property_id: UUID,
    db: Session = Depends(get_db),
    engine: AllocationEngine = Depends(get_allocation_engine),
    current_user: User = Depends(get_current_user)
):
    """Get a property with its allocation summary"""
    prop = db.get(Property, property_id)
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")

    detail = PropertyResponse.model_validate(prop).model_dump()
    detail["allocation"] = engine.allocation_summary(prop)
    return detail


@router.put("/{property_id}", response_model=PropertyResponse)
def update_property(
    property_id: UUID,
    property_update: PropertyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_type(UserType.LANDLORD))
):
    """Update a listing's descriptive and capacity fields"""
    prop = _owned_property(db, property_id, current_user)
    changes = property_update.model_dump(exclude_unset=True)

    for key in ("gender", "religion"):
        if changes.get(key):
            changes[key] = changes[key].upper()

    # Capacity edits are checked against the occupants under the same lock allocations take
    gateway = SqlAlchemyGateway(db)
    gateway.lock_property(prop.id)
    prop = gateway.find_property(prop.id)
    occupants = [occupant_state(o) for o in gateway.find_active_occupants(prop.id)]

    bedrooms = changes.get("bedrooms", prop.bedrooms)
    room_sharing = changes.get("room_sharing", prop.room_sharing)
    tenants_per_room = changes.get("tenants_per_room", prop.tenants_per_room) if room_sharing else 1
    error = check_capacity_change(bedrooms, tenants_per_room, occupants)
    if error is not None:
        db.rollback()
        logger.info(f"[PROPERTY] Rejected capacity change on {prop.id}: {error.message}")
        raise_for_error(error)
    changes["tenants_per_room"] = tenants_per_room

    for key, value in changes.items():
        setattr(prop, key, value)

    db.commit()
    db.refresh(prop)
    return prop


@router.get("/{property_id}/rooms", response_model=RoomsOverviewResponse)
def get_rooms(
    property_id: UUID,
    engine: AllocationEngine = Depends(get_allocation_engine),
    current_user: User = Depends(get_current_user)
):
    """Per-room occupancy breakdown (owner or admin)"""
    result = engine.room_overview(property_id, current_user.id)
    if not result.ok:
        raise_for_error(result.error)
    return result.data
