# Import all models in correct order so relationship strings resolve
from app.models.user import User, UserType, Gender
from app.models.property import Property, PropertyStatus, ANY_PREFERENCE
from app.models.occupant import Occupant, OccupantStatus
from app.models.notification import Notification, NotificationType
from app.models.review import Review

__all__ = [
    "User",
    "UserType",
    "Gender",
    "Property",
    "PropertyStatus",
    "ANY_PREFERENCE",
    "Occupant",
    "OccupantStatus",
    "Notification",
    "NotificationType",
    "Review",
]
