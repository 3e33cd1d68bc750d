"""
User-related Pydantic schemas for request/response validation.
"""
from typing import Optional

from pydantic import Field, field_validator

from photo_feed.schemas.common import CamelModel
from photo_feed.utils.security import BCRYPT_MAX_BYTES, fits_bcrypt


class SignupRequest(CamelModel):
    """Schema for account creation."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=100)
    question: str = Field(default="", max_length=255)
    answer: str = Field(default="", max_length=255)

    @field_validator("password", "answer")
    @classmethod
    def within_bcrypt_limit(cls, v: str) -> str:
        if not fits_bcrypt(v):
            raise ValueError(f"must be at most {BCRYPT_MAX_BYTES} bytes")
        return v


class LoginRequest(CamelModel):
    """Schema for user login."""

    username: str
    password: str


class RecoverRequest(CamelModel):
    """Schema for logging in with the recovery answer."""

    username: str
    answer: str


class RenameRequest(CamelModel):
    """Schema for changing a username."""

    old_username: str = Field(..., min_length=1, max_length=100)
    new_username: str = Field(..., min_length=1, max_length=100)


class UserResponse(CamelModel):
    """Public user view (never carries password, question or answer)."""

    id: int
    username: str
    profile_pic: str


class LoginResponse(CamelModel):
    """Schema for login / recovery success."""

    message: str
    user: UserResponse


class RenameResponse(CamelModel):
    """Schema for username change result."""

    message: str
    user: Optional[UserResponse] = None


class ProfilePicResponse(CamelModel):
    """Schema for profile picture upload result."""

    message: str
    profile_pic_url: str
