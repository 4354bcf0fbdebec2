"""
User Service
Account creation, credential checks and the read-only user lookup used
by the allocation engine.
"""
import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import get_password_hash, verify_password
from app.models.user import User, UserType
from app.services.allocation_rules import UserSummary

logger = logging.getLogger(__name__)


class SqlAlchemyUserLookup:
    """Resolves users to the summary the engine needs for compatibility checks."""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: uuid.UUID) -> Optional[UserSummary]:
        user = self.db.get(User, user_id)
        if user is None:
            return None
        return UserSummary(
            id=user.id,
            name=user.name,
            gender=user.gender,
            religion=user.religion,
            user_type=user.user_type,
        )


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()


def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    user_type: UserType = UserType.STUDENT,
    gender: Optional[str] = None,
    religion: Optional[str] = None,
) -> User:
    """
    Create a new user

    Args:
        db: Database session
        name: Display name
        email: Login email (stored lower-cased)
        password: Plain text password (will be hashed)
        user_type: STUDENT, LANDLORD or ADMIN
        gender: Student gender, used for room compatibility
        religion: Student religion, used for room compatibility

    Returns:
        Created user object
    """
    user = User(
        id=uuid.uuid4(),
        name=name,
        email=email.lower(),
        hashed_password=get_password_hash(password),
        user_type=user_type,
        gender=gender.upper() if gender else None,
        religion=religion.upper() if religion else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"[USER] Created {user.user_type.value} account {user.id}")
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user when the credentials match, otherwise None."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user
