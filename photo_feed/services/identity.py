"""
Identity service: signup, login, recovery, profile and username changes.
"""
from typing import Optional, Tuple
from urllib.parse import quote

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from photo_feed.config import get_settings
from photo_feed.exceptions import AuthenticationError, ConflictError, NotFoundError
from photo_feed.models.photo import Photo
from photo_feed.models.user import User
from photo_feed.schemas.user import SignupRequest
from photo_feed.utils.logger import log_info, log_warning
from photo_feed.utils.security import (
    dummy_verify,
    hash_answer,
    hash_password,
    verify_answer,
    verify_password,
)


class IdentityService:
    """
    Service for accounts and credentials.

    Username uniqueness is decided by the UNIQUE constraint on ``users.username``;
    the lookups before writes are only a fast path for the common case.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    async def signup(self, data: SignupRequest) -> User:
        """
        Create a new account with a placeholder avatar.

        Args:
            data: Signup form (username, password, question, answer)

        Returns:
            Created User model

        Raises:
            ConflictError: If the username already exists
        """
        if await self.get_user_by_username(data.username):
            log_warning("Signup failed", event="auth", username=data.username, reason="username_exists")
            raise ConflictError("Username already exists")

        user = User(
            username=data.username,
            hashed_password=hash_password(data.password),
            question=data.question,
            hashed_answer=hash_answer(data.answer),
            profile_pic=self.placeholder_avatar_url(data.username),
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            # 동시 가입: 다른 요청이 먼저 INSERT
            await self.db.rollback()
            log_warning("Signup failed", event="auth", username=data.username, reason="unique_violation")
            raise ConflictError("Username already exists")

        log_info("Signup", event="auth", user_id=user.id)
        return user

    async def login(self, username: str, password: str) -> User:
        """
        Authenticate with username and password.

        Raises:
            AuthenticationError: Unknown username, or wrong password. The latter
                carries ``needsRecovery`` and the stored recovery question.
        """
        user = await self.get_user_by_username(username)
        if not user:
            dummy_verify()
            log_warning("Login failed", event="auth", username=username, reason="user_not_found")
            raise AuthenticationError("User does not exist")

        if not verify_password(password, user.hashed_password):
            log_warning("Login failed", event="auth", user_id=user.id, reason="invalid_password")
            raise AuthenticationError(
                "Wrong password",
                extra={"needsRecovery": True, "question": user.question},
            )

        log_info("Login", event="auth", user_id=user.id)
        return user

    async def recover(self, username: str, answer: str) -> User:
        """
        Log in by answering the recovery question.

        Raises:
            AuthenticationError: If the user is unknown or the answer is wrong
        """
        user = await self.get_user_by_username(username)
        if not user:
            dummy_verify()
        if not user or not verify_answer(answer, user.hashed_answer):
            log_warning("Recovery failed", event="auth", username=username)
            raise AuthenticationError("Incorrect answer")

        log_info("Recovery login", event="auth", user_id=user.id)
        return user

    async def get_profile(self, username: str) -> User:
        """
        Raises:
            NotFoundError: If no such user
        """
        user = await self.get_user_by_username(username)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_profile_picture(self, username: str, file_url: str) -> str:
        """
        Point the user's profile picture at ``file_url``.
        No existence check: an unknown username updates zero rows and still succeeds.
        """
        result = await self.db.execute(
            update(User).where(User.username == username).values(profile_pic=file_url)
        )
        log_info("Profile picture updated", event="auth", rows=result.rowcount)
        return file_url

    async def rename_user(self, old_username: str, new_username: str) -> Tuple[Optional[User], bool]:
        """
        Change a username and re-attribute the user's photos.

        The users row and the photos' ``uploader`` column are written in the
        caller's transaction, so they commit (or roll back) together.

        Returns:
            (user, renamed). ``renamed`` is False when old and new are equal.

        Raises:
            ConflictError: If ``new_username`` is already taken
            NotFoundError: If ``old_username`` does not exist
        """
        if old_username == new_username:
            return await self.get_user_by_username(old_username), False

        if await self.get_user_by_username(new_username):
            log_warning("Rename failed", event="auth", reason="username_taken")
            raise ConflictError("Username already in use")

        user = await self.get_user_by_username(old_username)
        if not user:
            raise NotFoundError("User not found")

        user.username = new_username
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            log_warning("Rename failed", event="auth", reason="unique_violation")
            raise ConflictError("Username already in use")

        result = await self.db.execute(
            update(Photo)
            .where(Photo.uploader == old_username)
            .values(uploader=new_username)
        )
        log_info("Username changed", event="auth", user_id=user.id, photos=result.rowcount)
        return user, True

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Exact, case-sensitive username lookup."""
        result = await self.db.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    def placeholder_avatar_url(self, username: str) -> str:
        """Placeholder avatar keyed by the first character of the username."""
        return self.settings.avatar_placeholder_url.format(initial=quote(username[:1], safe=""))
