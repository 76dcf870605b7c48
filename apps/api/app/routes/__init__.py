"""Route modules."""

from .admin import router as admin_router
from .auth import router as auth_router
from .collections import router as collections_router
from .electron import router as electron_router
from .library import router as library_router
from .pages import router as pages_router
from .shared import router as shared_router

__all__ = [
    "admin_router",
    "auth_router",
    "collections_router",
    "electron_router",
    "library_router",
    "pages_router",
    "shared_router",
]
