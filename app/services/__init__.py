from app.services import allocation_engine
from app.services import allocation_rules
from app.services import notification_service
from app.services import persistence
from app.services import user_service

__all__ = [
    "allocation_engine",
    "allocation_rules",
    "notification_service",
    "persistence",
    "user_service",
]
