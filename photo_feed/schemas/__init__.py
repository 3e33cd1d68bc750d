"""
Pydantic schemas package.
All schemas are exported here for easy import.
"""
from photo_feed.schemas.common import CamelModel, MessageResponse
from photo_feed.schemas.user import (
    SignupRequest,
    LoginRequest,
    RecoverRequest,
    RenameRequest,
    UserResponse,
    LoginResponse,
    RenameResponse,
    ProfilePicResponse,
)
from photo_feed.schemas.photo import (
    PhotoResponse,
    PhotoUpdate,
    PhotoUploadResponse,
    LikeRequest,
    LikeResponse,
)

__all__ = [
    "CamelModel",
    "MessageResponse",
    # User schemas
    "SignupRequest",
    "LoginRequest",
    "RecoverRequest",
    "RenameRequest",
    "UserResponse",
    "LoginResponse",
    "RenameResponse",
    "ProfilePicResponse",
    # Photo schemas
    "PhotoResponse",
    "PhotoUpdate",
    "PhotoUploadResponse",
    "LikeRequest",
    "LikeResponse",
]
