"""
Security utility functions for credential hashing and upload file naming.
"""
import secrets
import time
from pathlib import Path

from passlib.context import CryptContext

from photo_feed.config import get_settings

settings = get_settings()

# bcrypt는 앞 72바이트만 사용하므로 더 긴 비밀 값은 받지 않음
BCRYPT_MAX_BYTES = 72

# Password / recovery answer hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds,
)


def fits_bcrypt(secret: str) -> bool:
    """True if the UTF-8 encoding of ``secret`` is within bcrypt's 72-byte input."""
    return len(secret.encode("utf-8")) <= BCRYPT_MAX_BYTES


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches
    """
    if not fits_bcrypt(plain_password):
        return False
    return pwd_context.verify(plain_password, hashed_password)


def hash_answer(answer: str) -> str:
    """Hash a recovery answer. Answers are matched exactly, like passwords."""
    return pwd_context.hash(answer)


def verify_answer(plain_answer: str, hashed_answer: str) -> bool:
    """Verify a recovery answer against its stored hash."""
    if not fits_bcrypt(plain_answer):
        return False
    return pwd_context.verify(plain_answer, hashed_answer)


def generate_upload_filename(original_filename: str) -> str:
    """
    Generate a collision-resistant filename for an uploaded file.

    Millisecond timestamp plus a random suffix, keeping the original extension.

    Args:
        original_filename: Original filename from upload

    Returns:
        Unique filename, e.g. ``1718000000000-3f9a1c2b.jpg``
    """
    ext = Path(original_filename or "").suffix.lower()
    millis = int(time.time() * 1000)
    return f"{millis}-{secrets.token_hex(4)}{ext}"


def dummy_verify() -> None:
    """Spend one hash verification so unknown users cost as much as wrong answers."""
    pwd_context.dummy_verify()
