"""
Allocation Rules
Pure validators and capacity arithmetic for room allocation.

Every validator takes an AllocationContext and returns an AllocationError
or None. Validators are composed left to right and the first failure wins,
so the order of ALLOCATE_RULES is the order in which callers see errors.
Nothing in this module touches the database.
"""
import math
import uuid
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from app.models.property import PropertyStatus, ANY_PREFERENCE
from app.models.user import UserType


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_STATE = "INVALID_STATE"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True)
class AllocationError:
    kind: ErrorKind
    message: str
    rule: str

    def as_conflict(self) -> "AllocationError":
        return AllocationError(ErrorKind.CONFLICT, self.message, self.rule)


@dataclass
class EngineResult:
    """Outcome of an engine operation: data on success, error otherwise."""
    data: Any = None
    error: Optional[AllocationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any = None) -> "EngineResult":
        return cls(data=data)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, rule: str) -> "EngineResult":
        return cls(error=AllocationError(kind, message, rule))


# ──────────────────────────── Snapshots ────────────────────────────

@dataclass(frozen=True)
class UserSummary:
    id: uuid.UUID
    name: str
    gender: Optional[str]
    religion: Optional[str]
    user_type: UserType


@dataclass(frozen=True)
class PropertyState:
    id: uuid.UUID
    owner_id: uuid.UUID
    location: str
    price: float
    bedrooms: int
    room_sharing: bool
    tenants_per_room: int
    current_occupants: int
    status: PropertyStatus
    gender: str = ANY_PREFERENCE
    religion: str = ANY_PREFERENCE

    @property
    def room_capacity(self) -> int:
        return self.tenants_per_room if self.room_sharing else 1

    @property
    def total_slots(self) -> int:
        return self.bedrooms * self.room_capacity


@dataclass(frozen=True)
class OccupantState:
    id: uuid.UUID
    user_id: uuid.UUID
    room_number: int
    number_of_rooms: int = 1
    name: Optional[str] = None
    gender: Optional[str] = None
    religion: Optional[str] = None


@dataclass(frozen=True)
class AllocationPolicy:
    max_rooms_shared: int = 2
    max_rooms_private: int = 1
    fair_distribution_enabled: bool = True
    min_slots_per_occupant: float = 1.0

    @classmethod
    def from_settings(cls, settings) -> "AllocationPolicy":
        return cls(
            max_rooms_shared=settings.MAX_ROOMS_PER_OCCUPANT_SHARED,
            max_rooms_private=settings.MAX_ROOMS_PER_OCCUPANT_PRIVATE,
            fair_distribution_enabled=settings.FAIR_DISTRIBUTION_ENABLED,
            min_slots_per_occupant=settings.FAIR_DISTRIBUTION_MIN_SLOTS_PER_OCCUPANT,
        )

    def max_rooms_for(self, prop: PropertyState) -> int:
        return self.max_rooms_shared if prop.room_sharing else self.max_rooms_private


@dataclass
class AllocationContext:
    property: Optional[PropertyState]
    occupants: List[OccupantState]
    caller_id: uuid.UUID
    student_id: uuid.UUID
    student: Optional[UserSummary]
    room_number: int
    number_of_rooms: int = 1
    policy: AllocationPolicy = field(default_factory=AllocationPolicy)

    def room_occupants(self) -> List[OccupantState]:
        return [o for o in self.occupants if o.room_number == self.room_number]


# ──────────────────────────── Arithmetic ────────────────────────────

def claimed_slots(occupants: Sequence[OccupantState]) -> int:
    return sum(o.number_of_rooms for o in occupants)


def status_after_allocation(prop: PropertyState, occupants: Sequence[OccupantState]) -> PropertyStatus:
    """RENTED once every room-slot is claimed. `occupants` already includes the new record."""
    if claimed_slots(occupants) >= prop.total_slots:
        return PropertyStatus.RENTED
    return PropertyStatus.AVAILABLE


def room_overview(prop: PropertyState, occupants: Sequence[OccupantState]) -> Dict[str, Any]:
    rooms = {
        number: {
            "room_number": number,
            "occupants": [],
            "total_occupants": 0,
            "capacity": prop.room_capacity,
            "available": True,
            "is_full": False,
        }
        for number in range(1, prop.bedrooms + 1)
    }

    for occupant in occupants:
        room = rooms.get(occupant.room_number)
        if room is None:
            continue
        room["occupants"].append(occupant)
        room["total_occupants"] += 1
        room["is_full"] = room["total_occupants"] >= prop.room_capacity
        room["available"] = not room["is_full"]

    room_list = list(rooms.values())
    summary = {
        "total_rooms": prop.bedrooms,
        "total_capacity": prop.total_slots,
        "total_occupants": prop.current_occupants,
        "available_spaces": max(prop.total_slots - prop.current_occupants, 0),
        "available_rooms": sum(1 for r in room_list if r["available"]),
        "full_rooms": sum(1 for r in room_list if r["is_full"]),
        "partially_occupied_rooms": (
            sum(1 for r in room_list if r["total_occupants"] > 0 and not r["is_full"])
            if prop.room_sharing else 0
        ),
        "empty_rooms": sum(1 for r in room_list if r["total_occupants"] == 0),
        "is_room_sharing": prop.room_sharing,
        "tenants_per_room": prop.tenants_per_room,
        "gender": prop.gender,
        "religion": prop.religion,
    }
    return {"rooms": room_list, "summary": summary}


@dataclass(frozen=True)
class AllocationSummary:
    total_rooms: int
    occupied_rooms: int
    available_rooms: int
    price_per_room: float
    is_shared: bool
    total_occupants: int
    max_occupants: int
    remaining_occupant_slots: int


def allocation_summary(prop: PropertyState, occupants: Sequence[OccupantState]) -> AllocationSummary:
    occupied = {o.room_number for o in occupants}
    overview = room_overview(prop, occupants)
    return AllocationSummary(
        total_rooms=prop.bedrooms,
        occupied_rooms=len(occupied),
        available_rooms=overview["summary"]["available_rooms"],
        price_per_room=prop.price,
        is_shared=prop.room_sharing,
        total_occupants=prop.current_occupants,
        max_occupants=prop.total_slots,
        remaining_occupant_slots=max(prop.total_slots - prop.current_occupants, 0),
    )


def check_capacity_change(
    bedrooms: int, room_capacity: int, occupants: Sequence[OccupantState]
) -> Optional[AllocationError]:
    """Reject a capacity edit that would strand or overfill current occupants."""
    stranded = sorted({o.room_number for o in occupants if o.room_number > bedrooms})
    if stranded:
        return AllocationError(
            ErrorKind.INVALID_STATE,
            f"Room {stranded[0]} is occupied and cannot be removed",
            "room_number",
        )
    per_room = Counter(o.room_number for o in occupants)
    for number, count in sorted(per_room.items()):
        if count > room_capacity:
            return AllocationError(
                ErrorKind.INVALID_STATE,
                f"Room {number} has {count} occupants, more than the new capacity of {room_capacity}",
                "room_capacity",
            )
    if claimed_slots(occupants) > bedrooms * room_capacity:
        return AllocationError(
            ErrorKind.INVALID_STATE,
            "Capacity cannot be reduced below the current number of occupants",
            "capacity",
        )
    return None


# ──────────────────────────── Validators ────────────────────────────

def _concrete(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip().upper()
    if not value or value == ANY_PREFERENCE:
        return None
    return value


def check_property_exists(ctx: AllocationContext) -> Optional[AllocationError]:
    if ctx.property is None:
        return AllocationError(ErrorKind.NOT_FOUND, "Property not found", "property_exists")
    return None


def check_owner(ctx: AllocationContext) -> Optional[AllocationError]:
    if ctx.property.owner_id != ctx.caller_id:
        return AllocationError(
            ErrorKind.UNAUTHORIZED, "Unauthorized - not the property owner", "property_owner"
        )
    return None


def check_allocatable_status(ctx: AllocationContext) -> Optional[AllocationError]:
    prop = ctx.property
    if prop.status == PropertyStatus.MAINTENANCE:
        return AllocationError(
            ErrorKind.INVALID_STATE, "Property is under maintenance", "property_status"
        )
    if prop.status == PropertyStatus.RENTED and not prop.room_sharing:
        return AllocationError(
            ErrorKind.INVALID_STATE, "Property is already fully rented", "property_status"
        )
    return None


def check_room_number(ctx: AllocationContext) -> Optional[AllocationError]:
    prop = ctx.property
    if not 1 <= ctx.room_number <= prop.bedrooms:
        return AllocationError(
            ErrorKind.INVALID_ARGUMENT,
            f"Room number must be between 1 and {prop.bedrooms}",
            "room_number",
        )
    max_rooms = ctx.policy.max_rooms_for(prop)
    if not 1 <= ctx.number_of_rooms <= max_rooms:
        return AllocationError(
            ErrorKind.INVALID_ARGUMENT,
            f"Number of rooms must be between 1 and {max_rooms}",
            "number_of_rooms",
        )
    return None


def check_not_already_occupant(ctx: AllocationContext) -> Optional[AllocationError]:
    if any(o.user_id == ctx.student_id for o in ctx.occupants):
        return AllocationError(ErrorKind.CONFLICT, "User is already an occupant", "already_occupant")
    return None


def check_student(ctx: AllocationContext) -> Optional[AllocationError]:
    if ctx.student is None:
        return AllocationError(ErrorKind.NOT_FOUND, "Student not found", "student_exists")
    if ctx.student.user_type != UserType.STUDENT:
        return AllocationError(
            ErrorKind.INVALID_ARGUMENT, "Only students can be allocated a room", "student_type"
        )
    return None


def check_room_capacity(ctx: AllocationContext) -> Optional[AllocationError]:
    prop = ctx.property
    in_room = len(ctx.room_occupants())
    if not prop.room_sharing and in_room > 0:
        return AllocationError(
            ErrorKind.CONFLICT, "This room is not available for sharing", "room_capacity"
        )
    if prop.room_sharing and in_room >= prop.tenants_per_room:
        return AllocationError(
            ErrorKind.CONFLICT,
            f"This room has reached its maximum capacity of {prop.tenants_per_room} tenants",
            "room_capacity",
        )
    return None


def check_compatibility(ctx: AllocationContext) -> Optional[AllocationError]:
    room = ctx.room_occupants()
    if not room or ctx.student is None:
        return None

    first = room[0]
    for attribute in ("gender", "religion"):
        existing = _concrete(getattr(first, attribute))
        candidate = _concrete(getattr(ctx.student, attribute))
        if existing and candidate and existing != candidate:
            return AllocationError(
                ErrorKind.CONFLICT,
                f"Cannot allocate: {attribute.capitalize()} incompatibility with "
                f"current room occupants ({existing.lower()})",
                f"{attribute}_compatibility",
            )
    return None


def check_fair_distribution(ctx: AllocationContext) -> Optional[AllocationError]:
    prop = ctx.property
    slots_after = prop.total_slots - claimed_slots(ctx.occupants) - ctx.number_of_rooms
    if slots_after < 0:
        return AllocationError(
            ErrorKind.CONFLICT,
            "Not enough room capacity left for the requested rooms",
            "fair_distribution",
        )

    if not ctx.policy.fair_distribution_enabled:
        return None

    occupants_after = max(prop.total_slots - prop.current_occupants - 1, 0)
    needed = math.ceil(occupants_after * ctx.policy.min_slots_per_occupant)
    if occupants_after > 0 and slots_after < needed:
        return AllocationError(
            ErrorKind.CONFLICT,
            f"Allocating {ctx.number_of_rooms} room(s) would leave {slots_after} room slot(s) "
            f"for {occupants_after} remaining occupant(s)",
            "fair_distribution",
        )
    return None


Validator = Callable[[AllocationContext], Optional[AllocationError]]

# Room capacity runs before the status check so a full room reports a
# capacity conflict; the status check then only catches properties marked
# RENTED or MAINTENANCE while the requested room still has space.
ALLOCATE_RULES: List[Validator] = [
    check_property_exists,
    check_owner,
    check_room_number,
    check_not_already_occupant,
    check_student,
    check_room_capacity,
    check_allocatable_status,
    check_compatibility,
    check_fair_distribution,
]

# Re-run against fresh state inside the write transaction
IN_TRANSACTION_RULES: List[Validator] = [
    check_not_already_occupant,
    check_room_capacity,
    check_compatibility,
    check_fair_distribution,
]


def run_rules(ctx: AllocationContext, rules: Sequence[Validator] = ALLOCATE_RULES) -> Optional[AllocationError]:
    for rule in rules:
        error = rule(ctx)
        if error is not None:
            return error
    return None
