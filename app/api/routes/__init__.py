from app.api.routes.auth import router as auth_router
from app.api.routes.properties import router as properties_router
from app.api.routes.allocations import router as allocations_router
from app.api.routes.notifications import router as notifications_router
from app.api.routes.reviews import router as reviews_router
from app.api.routes.users import router as users_router

__all__ = [
    "auth_router",
    "properties_router",
    "allocations_router",
    "notifications_router",
    "reviews_router",
    "users_router",
]
