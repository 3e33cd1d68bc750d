"""
Domain exceptions for the photo feed.

Services raise these; the handler registered in main.py renders them as
``{"message": ..., **extra}`` with the matching status code. Anything else that
escapes a request becomes a generic 500.

    PhotoFeedError (base, 400)
    ├── ValidationError       → 400 (missing upload file, bad input)
    ├── ConflictError         → 400 (username taken)
    ├── NotFoundError         → 404 (unknown user)
    └── AuthenticationError   → 401 (unknown login, wrong password, wrong answer)
"""
from typing import Any, Dict, Optional


class PhotoFeedError(Exception):
    """Base class for errors that are the client's to fix."""

    status_code: int = 400

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.message = message
        # extra 필드는 응답 본문에 그대로 포함됨 (예: 복구 질문)
        self.extra = extra or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, **self.extra}


class ValidationError(PhotoFeedError):
    status_code = 400


class ConflictError(PhotoFeedError):
    """The requested username is already in use."""

    status_code = 400


class NotFoundError(PhotoFeedError):
    status_code = 404


class AuthenticationError(PhotoFeedError):
    """Credentials or recovery answer did not verify."""

    status_code = 401
