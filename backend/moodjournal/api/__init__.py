from .analytics import router as analytics_router
from .categories import router as categories_router
from .entries import router as entries_router
from .tags import router as tags_router
from .users import router as users_router

__all__ = [
    "analytics_router",
    "categories_router",
    "entries_router",
    "tags_router",
    "users_router",
]
