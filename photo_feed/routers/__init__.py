"""
API routers package.
"""
from photo_feed.routers.auth import router as auth_router
from photo_feed.routers.photos import router as photos_router
from photo_feed.routers.users import router as users_router

__all__ = ["auth_router", "photos_router", "users_router"]
