"""
Utility functions package.
"""
from photo_feed.utils.security import (
    hash_password,
    verify_password,
    hash_answer,
    verify_answer,
    generate_upload_filename,
)

__all__ = [
    "hash_password",
    "verify_password",
    "hash_answer",
    "verify_answer",
    "generate_upload_filename",
]
