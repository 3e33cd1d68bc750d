"""
Services package.
Contains business logic and the local file store.
"""
from photo_feed.services.file_store import LocalFileStore, get_file_store
from photo_feed.services.identity import IdentityService
from photo_feed.services.photo import PhotoService

__all__ = [
    "LocalFileStore",
    "get_file_store",
    "IdentityService",
    "PhotoService",
]
