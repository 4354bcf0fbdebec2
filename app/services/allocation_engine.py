"""
Allocation Engine
Assigns students to rooms and releases them, keeping
Property.current_occupants and Property.status consistent with the
ACTIVE occupant rows.

Every public method returns an EngineResult; nothing is raised across
this boundary. Validation happens before the write; capacity rules are
re-checked under the property row lock inside the transaction.
"""
import logging
import uuid
from typing import Any, Dict, Optional

from app.db.base import utcnow
from app.models.occupant import OccupantStatus
from app.models.property import PropertyStatus
from app.models.user import UserType
from app.services.allocation_rules import (
    ALLOCATE_RULES, IN_TRANSACTION_RULES,
    AllocationContext, AllocationError, AllocationPolicy, EngineResult, ErrorKind,
    allocation_summary, room_overview, run_rules, status_after_allocation,
)
from app.services.notification_service import NotificationSink, TenantLeftEvent
from app.services.persistence import (
    OccupantInsert, OccupantUpdate, PersistenceError, PropertyUpdate,
    SqlAlchemyGateway, TransactionAborted, occupant_state, property_state,
)
from app.services.user_service import SqlAlchemyUserLookup

logger = logging.getLogger(__name__)


def _as_uuid(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def _as_int(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class AllocationEngine:
    """Room allocation and release for a single request."""

    def __init__(
        self,
        gateway: SqlAlchemyGateway,
        users: SqlAlchemyUserLookup,
        notifier: NotificationSink,
        policy: Optional[AllocationPolicy] = None,
    ):
        self.gateway = gateway
        self.users = users
        self.notifier = notifier
        self.policy = policy or AllocationPolicy()

    # ──────────────────────────── Allocate ────────────────────────────

    def allocate(
        self,
        property_id,
        student_user_id,
        room_number: int,
        caller_user_id,
        number_of_rooms: int = 1,
    ) -> EngineResult:
        """
        Assign a student to a room.

        Returns:
            EngineResult with data {"occupant", "property", "allocation"}
            on success, or the first failed rule.
        """
        ids = self._parse_ids(property_id=property_id, student_user_id=student_user_id,
                              caller_user_id=caller_user_id)
        if isinstance(ids, EngineResult):
            return ids
        if room_number is None:
            return EngineResult.failure(
                ErrorKind.INVALID_ARGUMENT, "Missing required field: room_number", "required_fields"
            )
        room_number, number_of_rooms = _as_int(room_number), _as_int(number_of_rooms)
        if room_number is None:
            return EngineResult.failure(
                ErrorKind.INVALID_ARGUMENT, "Room number must be a whole number", "room_number"
            )
        if number_of_rooms is None:
            return EngineResult.failure(
                ErrorKind.INVALID_ARGUMENT, "Number of rooms must be a whole number", "number_of_rooms"
            )

        try:
            prop_state, occupants = self.gateway.load_state(ids["property_id"])
            ctx = AllocationContext(
                property=prop_state,
                occupants=occupants,
                caller_id=ids["caller_user_id"],
                student_id=ids["student_user_id"],
                student=self.users.get_user(ids["student_user_id"]),
                room_number=room_number,
                number_of_rooms=number_of_rooms,
                policy=self.policy,
            )
            error = run_rules(ctx, ALLOCATE_RULES)
            if error is not None:
                logger.info(
                    f"[ALLOCATE] Rejected student {ids['student_user_id']} for property "
                    f"{ids['property_id']} room {room_number}: {error.rule}"
                )
                return EngineResult(error=error)

            def guard(gateway: SqlAlchemyGateway):
                fresh_property, fresh_occupants = gateway.load_state(ctx.property.id)
                ctx.property = fresh_property
                ctx.occupants = fresh_occupants
                failed = run_rules(ctx, IN_TRANSACTION_RULES)
                return failed.as_conflict() if failed else None

            occupant, updated_property = self.gateway.run_transaction(
                [
                    OccupantInsert(
                        property_id=prop_state.id,
                        user_id=ctx.student_id,
                        room_number=room_number,
                        number_of_rooms=number_of_rooms,
                        total_price=prop_state.price * number_of_rooms,
                    ),
                    PropertyUpdate(
                        property_id=prop_state.id,
                        occupant_delta=1,
                        status_rule=status_after_allocation,
                    ),
                ],
                guard=guard,
                lock_property_id=prop_state.id,
            )
        except TransactionAborted as aborted:
            logger.info(f"[ALLOCATE] Transaction aborted: {aborted.error.rule}")
            return EngineResult(error=aborted.error.as_conflict())
        except PersistenceError as exc:
            return EngineResult.failure(ErrorKind.INTERNAL, f"Database error: {exc}", "persistence")
        except Exception as exc:
            logger.exception(f"[ALLOCATE] Unexpected error: {exc}")
            return EngineResult.failure(ErrorKind.INTERNAL, "Internal server error", "unexpected")

        logger.info(
            f"[ALLOCATE] Student {occupant.user_id} -> property {updated_property.id} "
            f"room {occupant.room_number} (status {updated_property.status.value})"
        )
        return EngineResult.success({
            "occupant": occupant,
            "property": updated_property,
            "allocation": self._summary_for(updated_property),
        })

    # ──────────────────────────── Release ────────────────────────────

    def unallocate(self, property_id, student_user_id, caller_user_id) -> EngineResult:
        """Landlord releases a student's ACTIVE occupancy on their property."""
        ids = self._parse_ids(property_id=property_id, student_user_id=student_user_id,
                              caller_user_id=caller_user_id)
        if isinstance(ids, EngineResult):
            return ids

        try:
            prop = self.gateway.find_property(ids["property_id"])
            if prop is None:
                return EngineResult.failure(ErrorKind.NOT_FOUND, "Property not found", "property_exists")
            if prop.owner_id != ids["caller_user_id"]:
                return EngineResult.failure(
                    ErrorKind.UNAUTHORIZED,
                    "You are not authorized to manage this property",
                    "property_owner",
                )
            occupant = self.gateway.find_active_occupancy(prop.id, ids["student_user_id"])
            if occupant is None:
                return EngineResult.failure(
                    ErrorKind.NOT_FOUND,
                    "No active occupancy found for this user and property",
                    "active_occupancy",
                )
            return self._release(occupant.id, prop.id, "UNALLOCATE")
        except Exception as exc:
            logger.exception(f"[UNALLOCATE] Unexpected error: {exc}")
            return EngineResult.failure(ErrorKind.INTERNAL, "Failed to unallocate room", "unexpected")

    def leave(self, occupant_id, student_user_id) -> EngineResult:
        """A student releases their own ACTIVE occupancy."""
        ids = self._parse_ids(occupant_id=occupant_id, student_user_id=student_user_id)
        if isinstance(ids, EngineResult):
            return ids

        try:
            occupant = self.gateway.find_occupancy(ids["occupant_id"])
            if (
                occupant is None
                or occupant.user_id != ids["student_user_id"]
                or occupant.status != OccupantStatus.ACTIVE
            ):
                return EngineResult.failure(
                    ErrorKind.NOT_FOUND, "No active occupancy found", "active_occupancy"
                )
            return self._release(occupant.id, occupant.property_id, "LEAVE")
        except Exception as exc:
            logger.exception(f"[LEAVE] Unexpected error: {exc}")
            return EngineResult.failure(ErrorKind.INTERNAL, "Failed to leave room", "unexpected")

    def _release(self, occupant_id: uuid.UUID, property_id: uuid.UUID, tag: str) -> EngineResult:
        def guard(gateway: SqlAlchemyGateway):
            current = gateway.find_occupancy(occupant_id)
            if current is None or current.status != OccupantStatus.ACTIVE:
                return AllocationError(
                    ErrorKind.CONFLICT, "Occupancy was already released", "active_occupancy"
                )
            return None

        try:
            occupant, prop = self.gateway.run_transaction(
                [
                    OccupantUpdate(
                        occupant_id=occupant_id,
                        status=OccupantStatus.INACTIVE,
                        end_date=utcnow(),
                    ),
                    # Any release puts the property back on the market, even when
                    # other occupants remain.
                    PropertyUpdate(
                        property_id=property_id,
                        occupant_delta=-1,
                        status=PropertyStatus.AVAILABLE,
                    ),
                ],
                guard=guard,
                lock_property_id=property_id,
            )
        except TransactionAborted as aborted:
            logger.info(f"[{tag}] Transaction aborted: {aborted.error.rule}")
            return EngineResult(error=aborted.error.as_conflict())
        except PersistenceError as exc:
            return EngineResult.failure(ErrorKind.INTERNAL, f"Database error: {exc}", "persistence")

        logger.info(f"[{tag}] Occupancy {occupant.id} released from property {prop.id}")
        self._notify_tenant_left(occupant, prop)
        return EngineResult.success({"occupant": occupant, "property": prop})

    def _notify_tenant_left(self, occupant, prop) -> None:
        try:
            student = self.users.get_user(occupant.user_id)
            self.notifier.emit_tenant_left(TenantLeftEvent(
                student_id=occupant.user_id,
                student_name=student.name if student else "A student",
                property_id=prop.id,
                property_location=prop.location,
                room_number=occupant.room_number,
                landlord_id=prop.owner_id,
            ))
        except Exception as exc:
            logger.error(f"[NOTIFY] Failed to dispatch TENANT_LEFT for occupancy {occupant.id}: {exc}")

    # ──────────────────────────── Queries ────────────────────────────

    def check_allocation(self, property_id, user_id) -> EngineResult:
        property_uuid, user_uuid = _as_uuid(property_id), _as_uuid(user_id)
        if property_uuid is None or user_uuid is None:
            return EngineResult.success({"is_active": False, "occupant": None})
        try:
            occupant = self.gateway.find_active_occupancy(property_uuid, user_uuid)
        except Exception as exc:
            logger.error(f"[CHECK_ALLOCATION] {exc}")
            return EngineResult.success({"is_active": False, "occupant": None})
        return EngineResult.success({"is_active": occupant is not None, "occupant": occupant})

    def student_allocation(self, student_user_id) -> EngineResult:
        ids = self._parse_ids(student_user_id=student_user_id)
        if isinstance(ids, EngineResult):
            return ids
        occupant = self.gateway.find_student_allocation(ids["student_user_id"])
        if occupant is None:
            return EngineResult.failure(
                ErrorKind.NOT_FOUND, "No active room allocation found", "active_occupancy"
            )
        return EngineResult.success({"occupant": occupant, "property": occupant.property})

    def room_overview(self, property_id, caller_user_id) -> EngineResult:
        ids = self._parse_ids(property_id=property_id, caller_user_id=caller_user_id)
        if isinstance(ids, EngineResult):
            return ids

        prop = self.gateway.find_property(ids["property_id"])
        if prop is None:
            return EngineResult.failure(ErrorKind.NOT_FOUND, "Property not found", "property_exists")

        caller = self.users.get_user(ids["caller_user_id"])
        is_admin = caller is not None and caller.user_type == UserType.ADMIN
        if not is_admin and prop.owner_id != ids["caller_user_id"]:
            return EngineResult.failure(
                ErrorKind.UNAUTHORIZED,
                "You are not authorized to access this information",
                "property_owner",
            )

        occupants = [occupant_state(o) for o in self.gateway.find_active_occupants(prop.id)]
        return EngineResult.success(room_overview(property_state(prop), occupants))

    def landlord_occupants(self, landlord_user_id) -> EngineResult:
        ids = self._parse_ids(landlord_user_id=landlord_user_id)
        if isinstance(ids, EngineResult):
            return ids
        return EngineResult.success(self.gateway.find_landlord_occupants(ids["landlord_user_id"]))

    def allocation_summary(self, prop):
        return self._summary_for(prop)

    # ──────────────────────────── Helpers ────────────────────────────

    def _summary_for(self, prop):
        occupants = [occupant_state(o) for o in self.gateway.find_active_occupants(prop.id)]
        return allocation_summary(property_state(prop), occupants)

    @staticmethod
    def _parse_ids(**raw: Any):
        parsed: Dict[str, uuid.UUID] = {}
        for name, value in raw.items():
            if value is None or value == "":
                return EngineResult.failure(
                    ErrorKind.INVALID_ARGUMENT, f"Missing required field: {name}", "required_fields"
                )
            parsed_value = _as_uuid(value)
            if parsed_value is None:
                return EngineResult.failure(
                    ErrorKind.INVALID_ARGUMENT, f"Invalid identifier for {name}", "required_fields"
                )
            parsed[name] = parsed_value
        return parsed
