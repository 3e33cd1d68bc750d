"""
Database models package.
All models are exported here for easy import.
"""
from photo_feed.models.user import User
from photo_feed.models.photo import Photo
from photo_feed.models.like import Like

__all__ = ["User", "Photo", "Like"]
