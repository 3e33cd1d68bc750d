"""
Photo-related Pydantic schemas for request/response validation.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from photo_feed.schemas.common import CamelModel


class PhotoResponse(CamelModel):
    """
    Schema for a photo in the feed.
    ``likes`` lists the usernames that liked the photo.
    """

    id: int
    uploader: str
    url: str
    title: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    created_at: datetime
    likes: List[str] = Field(default_factory=list)


class PhotoUpdate(CamelModel):
    """Schema for editing photo metadata. ``tags`` is comma-separated."""

    title: Optional[str] = Field(None, max_length=255)
    tags: Optional[str] = None
    description: Optional[str] = None


class PhotoUploadResponse(CamelModel):
    """Schema for photo upload response."""

    message: str = "Photo uploaded"
    photo_id: int


class LikeRequest(CamelModel):
    """Schema for toggling a like."""

    photo_id: int
    username: str


class LikeResponse(CamelModel):
    """Schema for like toggle result. ``liked`` is the state after the toggle."""

    message: str
    liked: bool
