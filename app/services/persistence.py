"""
Persistence Gateway
SQLAlchemy-backed reads and the single atomic write path used by the
allocation engine. All occupant/property mutations go through
run_transaction so the occupant rows and Property.current_occupants
change together or not at all.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Union

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.db.base import utcnow
from app.models.occupant import Occupant, OccupantStatus
from app.models.property import Property, PropertyStatus
from app.services.allocation_rules import (
    AllocationError, ErrorKind, OccupantState, PropertyState,
)

logger = logging.getLogger(__name__)


class TransactionAborted(Exception):
    """Raised inside run_transaction when re-validation fails; carries the error."""

    def __init__(self, error: AllocationError):
        super().__init__(error.message)
        self.error = error


class PersistenceError(Exception):
    """Database failure while reading or writing allocation state."""


# ──────────────────────────── Commands ────────────────────────────

@dataclass
class OccupantInsert:
    property_id: uuid.UUID
    user_id: uuid.UUID
    room_number: int
    total_price: float
    number_of_rooms: int = 1


@dataclass
class OccupantUpdate:
    occupant_id: uuid.UUID
    status: OccupantStatus
    end_date: Optional[datetime] = None


@dataclass
class PropertyUpdate:
    property_id: uuid.UUID
    occupant_delta: int = 0
    status: Optional[PropertyStatus] = None
    # Computes the status from post-write state; wins over `status`
    status_rule: Optional[Callable[[PropertyState, List[OccupantState]], PropertyStatus]] = None


Operation = Union[OccupantInsert, OccupantUpdate, PropertyUpdate]
Guard = Callable[["SqlAlchemyGateway"], Optional[AllocationError]]


def property_state(prop: Property) -> PropertyState:
    return PropertyState(
        id=prop.id,
        owner_id=prop.owner_id,
        location=prop.location,
        price=prop.price,
        bedrooms=prop.bedrooms,
        room_sharing=prop.room_sharing,
        tenants_per_room=prop.tenants_per_room,
        current_occupants=prop.current_occupants,
        status=prop.status,
        gender=prop.gender,
        religion=prop.religion,
    )


def occupant_state(occupant: Occupant) -> OccupantState:
    user = occupant.user
    return OccupantState(
        id=occupant.id,
        user_id=occupant.user_id,
        room_number=occupant.room_number,
        number_of_rooms=occupant.number_of_rooms,
        name=user.name if user else None,
        gender=user.gender if user else None,
        religion=user.religion if user else None,
    )


class SqlAlchemyGateway:
    """Reads and transactional writes over one SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # ──────────────────────────── Reads ────────────────────────────

    def find_property(self, property_id: uuid.UUID) -> Optional[Property]:
        return self.db.execute(
            select(Property)
            .where(Property.id == property_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def find_active_occupants(self, property_id: uuid.UUID) -> List[Occupant]:
        return list(
            self.db.execute(
                select(Occupant)
                .options(joinedload(Occupant.user))
                .where(
                    Occupant.property_id == property_id,
                    Occupant.status == OccupantStatus.ACTIVE,
                )
                .order_by(Occupant.start_date, Occupant.created_at)
                .execution_options(populate_existing=True)
            ).scalars().all()
        )

    def find_active_occupancy(self, property_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Occupant]:
        return self.db.execute(
            select(Occupant)
            .options(joinedload(Occupant.user), joinedload(Occupant.property))
            .where(
                Occupant.property_id == property_id,
                Occupant.user_id == user_id,
                Occupant.status == OccupantStatus.ACTIVE,
            )
            .execution_options(populate_existing=True)
        ).scalars().first()

    def find_occupancy(self, occupant_id: uuid.UUID) -> Optional[Occupant]:
        return self.db.execute(
            select(Occupant)
            .options(joinedload(Occupant.user), joinedload(Occupant.property))
            .where(Occupant.id == occupant_id)
            .execution_options(populate_existing=True)
        ).scalars().first()

    def find_student_allocation(self, user_id: uuid.UUID) -> Optional[Occupant]:
        return self.db.execute(
            select(Occupant)
            .options(joinedload(Occupant.user), joinedload(Occupant.property))
            .where(Occupant.user_id == user_id, Occupant.status == OccupantStatus.ACTIVE)
            .order_by(Occupant.start_date.desc())
        ).scalars().first()

    def find_landlord_occupants(self, landlord_id: uuid.UUID) -> List[Occupant]:
        return list(
            self.db.execute(
                select(Occupant)
                .join(Property, Occupant.property_id == Property.id)
                .options(joinedload(Occupant.user), joinedload(Occupant.property))
                .where(Property.owner_id == landlord_id, Occupant.status == OccupantStatus.ACTIVE)
                .order_by(Property.location, Occupant.room_number)
            ).scalars().all()
        )

    def load_state(self, property_id: uuid.UUID):
        """Property snapshot plus ACTIVE occupant snapshots, or (None, [])."""
        prop = self.find_property(property_id)
        if prop is None:
            return None, []
        return property_state(prop), [occupant_state(o) for o in self.find_active_occupants(property_id)]

    # ──────────────────────────── Writes ────────────────────────────

    def lock_property(self, property_id: uuid.UUID) -> None:
        """
        Hold the property for writing until the session commits or rolls back.

        SQLite has no row locks and ignores FOR UPDATE, and pysqlite only
        opens a transaction on the first write. A no-op UPDATE opens it and
        takes the database write lock, so reads that follow cannot be
        invalidated by another writer before commit.
        """
        if self.db.get_bind().dialect.name == "sqlite":
            self.db.execute(
                update(Property)
                .where(Property.id == property_id)
                .values(current_occupants=Property.current_occupants)
                .execution_options(synchronize_session=False)
            )
        else:
            self.db.execute(
                select(Property.id).where(Property.id == property_id).with_for_update()
            )

    def run_transaction(
        self,
        ops: Sequence[Operation],
        guard: Optional[Guard] = None,
        lock_property_id: Optional[uuid.UUID] = None,
    ) -> list:
        """
        Apply ops atomically.

        Args:
            ops:              Commands applied in order.
            guard:            Re-validation run after the property row is locked
                              and before any write. Returning an error aborts.
            lock_property_id: Property to hold for writing, see lock_property().

        Returns:
            One result per op: the Occupant for occupant ops, the Property for
            property ops.

        Raises:
            TransactionAborted: guard rejected or a uniqueness constraint fired.
            PersistenceError:   any other database failure.
        """
        try:
            if lock_property_id is not None:
                self.lock_property(lock_property_id)
            if guard is not None:
                error = guard(self)
                if error is not None:
                    raise TransactionAborted(error)

            results = [self._apply(op) for op in ops]
            self.db.commit()
        except TransactionAborted:
            self.db.rollback()
            raise
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning(f"[TXN] Constraint violation, rolled back: {exc.orig}")
            raise TransactionAborted(
                AllocationError(ErrorKind.CONFLICT, "User is already an occupant", "already_occupant")
            ) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"[TXN] Database error, rolled back: {exc}")
            raise PersistenceError(str(exc)) from exc
        except Exception:
            self.db.rollback()
            raise

        for result in results:
            self.db.refresh(result)
        return results

    def _apply(self, op: Operation):
        if isinstance(op, OccupantInsert):
            occupant = Occupant(
                property_id=op.property_id,
                user_id=op.user_id,
                room_number=op.room_number,
                number_of_rooms=op.number_of_rooms,
                total_price=op.total_price,
                status=OccupantStatus.ACTIVE,
                start_date=utcnow(),
            )
            self.db.add(occupant)
            self.db.flush()
            return occupant

        if isinstance(op, OccupantUpdate):
            occupant = self.db.get(Occupant, op.occupant_id)
            if occupant is None:
                raise LookupError(f"Occupant {op.occupant_id} not found")
            occupant.status = op.status
            occupant.end_date = op.end_date
            self.db.flush()
            return occupant

        if isinstance(op, PropertyUpdate):
            return self._apply_property_update(op)

        raise TypeError(f"Unsupported operation: {op!r}")

    def _apply_property_update(self, op: PropertyUpdate) -> Property:
        values = {}
        if op.occupant_delta:
            adjusted = Property.current_occupants + op.occupant_delta
            values["current_occupants"] = case((adjusted < 0, 0), else_=adjusted)
        if op.status is not None:
            values["status"] = op.status
        if values:
            self.db.execute(
                update(Property)
                .where(Property.id == op.property_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )

        if op.status_rule is not None:
            prop_snapshot, occupants = self.load_state(op.property_id)
            self.db.execute(
                update(Property)
                .where(Property.id == op.property_id)
                .values(status=op.status_rule(prop_snapshot, occupants))
                .execution_options(synchronize_session=False)
            )

        return self.find_property(op.property_id)
