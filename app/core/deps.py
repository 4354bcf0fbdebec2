from fastapi import BackgroundTasks, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
import logging
import uuid

from app.core.config import settings
from app.core.security import decode_access_token
from app.database import SessionLocal, get_db
from app.models.user import User, UserType
from app.services.allocation_engine import AllocationEngine
from app.services.allocation_rules import AllocationPolicy, AllocationError, ErrorKind
from app.services.notification_service import (
    BackgroundNotificationSink, DatabaseNotificationSink, NotificationSink,
)
from app.services.persistence import SqlAlchemyGateway
from app.services.user_service import SqlAlchemyUserLookup

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token.
    Returns 401 if token is invalid or user not found.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None or payload.get("sub") is None:
        raise credentials_exception

    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        logger.warning("Token 'sub' is not a valid user id")
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None:
        logger.warning(f"User not found in database: {user_id}")
        raise credentials_exception

    return user


def require_user_type(*user_types: UserType):
    def checker(user: User = Depends(get_current_user)) -> User:
        if user.user_type not in user_types:
            allowed = ", ".join(t.value.lower() for t in user_types)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Only {allowed} accounts can perform this action",
            )
        return user
    return checker


def get_notification_sink(background_tasks: BackgroundTasks) -> NotificationSink:
    return BackgroundNotificationSink(
        background_tasks,
        DatabaseNotificationSink(SessionLocal, max_retries=settings.NOTIFICATION_MAX_RETRIES),
    )


def get_allocation_engine(
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notification_sink),
) -> AllocationEngine:
    return AllocationEngine(
        gateway=SqlAlchemyGateway(db),
        users=SqlAlchemyUserLookup(db),
        notifier=notifier,
        policy=AllocationPolicy.from_settings(settings),
    )


ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_error(error: AllocationError) -> None:
    """Translate an engine error into an HTTPException"""
    raise HTTPException(
        status_code=ERROR_STATUS[error.kind],
        detail={"message": error.message, "kind": error.kind.value, "rule": error.rule},
    )
