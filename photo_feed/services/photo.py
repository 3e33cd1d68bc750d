"""
Photo catalog service: feed listing, uploads, edits, deletes and likes.
"""
import json
import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from photo_feed.exceptions import NotFoundError, ValidationError
from photo_feed.models.like import Like
from photo_feed.models.photo import Photo
from photo_feed.models.user import User
from photo_feed.schemas.photo import PhotoResponse, PhotoUpdate

logger = logging.getLogger("photo_feed.photo")


def parse_tags(tags_csv: Optional[str]) -> List[str]:
    """
    Split a comma-separated tag string into trimmed, non-empty tags.

    >>> parse_tags("a, b , c")
    ['a', 'b', 'c']
    """
    if not tags_csv:
        return []
    return [tag.strip() for tag in tags_csv.split(",") if tag.strip()]


def encode_tags(tags: List[str]) -> str:
    """Serialize tags for the ``photos.tags`` text column."""
    return json.dumps(tags, ensure_ascii=False)


def decode_tags(raw: Any) -> List[str]:
    """
    Decode a stored ``tags`` value into a list of strings.

    Current rows hold a JSON array. Legacy rows may hold a bare
    comma-separated string or NULL.
    """
    if raw is None:
        return []
    if isinstance(raw, list):
        return [str(tag) for tag in raw]
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        return parse_tags(str(raw))
    if isinstance(decoded, list):
        return [str(tag) for tag in decoded]
    if isinstance(decoded, str):
        return parse_tags(decoded)
    # "2024", "true": 숫자/불리언 한 개짜리 legacy CSV
    return parse_tags(str(raw))


class PhotoService:
    """
    Service for photo records and likes.
    File bytes are handled by the file store; this service only sees URLs.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_photos(self) -> List[PhotoResponse]:
        """
        All photos, newest first, each with the usernames that liked it.
        """
        result = await self.db.execute(
            select(Photo).order_by(Photo.created_at.desc(), Photo.id.desc())
        )
        photos = list(result.scalars().all())

        likes_by_photo: Dict[int, List[str]] = defaultdict(list)
        like_rows = await self.db.execute(
            select(Like.photo_id, User.username)
            .join(User, Like.user_id == User.id)
            .order_by(Like.created_at, User.username)
        )
        for photo_id, username in like_rows.all():
            likes_by_photo[photo_id].append(username)

        return [
            PhotoResponse(
                id=photo.id,
                uploader=photo.uploader,
                url=photo.url,
                title=photo.title,
                tags=decode_tags(photo.tags),
                description=photo.description,
                created_at=photo.created_at,
                likes=likes_by_photo.get(photo.id, []),
            )
            for photo in photos
        ]

    async def upload_photo(
        self,
        uploader: str,
        title: Optional[str],
        tags_csv: Optional[str],
        description: Optional[str],
        stored_file_url: Optional[str],
    ) -> Photo:
        """
        Record a photo whose file the file store has already written.

        Raises:
            ValidationError: If no file was stored or no uploader was given
        """
        if not stored_file_url:
            raise ValidationError("A photo file is required")
        if not uploader:
            raise ValidationError("uploader is required")

        photo = Photo(
            uploader=uploader,
            url=stored_file_url,
            title=title,
            tags=encode_tags(parse_tags(tags_csv)),
            description=description,
        )
        self.db.add(photo)
        await self.db.flush()
        logger.info("Photo uploaded", extra={"event": "photo", "photo_id": photo.id})
        return photo

    async def update_photo(self, photo_id: int, update_data: PhotoUpdate) -> int:
        """
        Overwrite title, tags and description. A missing id updates nothing.

        Returns:
            Number of rows updated (0 or 1)
        """
        result = await self.db.execute(
            update(Photo)
            .where(Photo.id == photo_id)
            .values(
                title=update_data.title,
                tags=encode_tags(parse_tags(update_data.tags)),
                description=update_data.description,
            )
        )
        return result.rowcount

    async def delete_photo(self, photo_id: int) -> Optional[str]:
        """
        Delete a photo and its likes in the current transaction.
        A missing id is a no-op.

        Returns:
            URL of the deleted photo's file, or None if nothing was deleted
        """
        url = (
            await self.db.execute(select(Photo.url).where(Photo.id == photo_id))
        ).scalar_one_or_none()

        await self.db.execute(delete(Like).where(Like.photo_id == photo_id))
        await self.db.execute(delete(Photo).where(Photo.id == photo_id))
        if url is not None:
            logger.info("Photo deleted", extra={"event": "photo", "photo_id": photo_id})
        return url

    async def toggle_like(self, photo_id: int, username: str) -> bool:
        """
        Flip the like for (username, photo).

        Delete-first: if the DELETE removed a row the photo is now unliked,
        otherwise a row is inserted. A unique violation on that insert means a
        concurrent request liked it first, which is the same end state.

        Returns:
            True if the photo is liked after the call

        Raises:
            NotFoundError: If the user or the photo does not exist
        """
        user_id = (
            await self.db.execute(select(User.id).where(User.username == username))
        ).scalar_one_or_none()
        if user_id is None:
            raise NotFoundError("User not found")

        removed = await self.db.execute(
            delete(Like)
            .where(Like.user_id == user_id, Like.photo_id == photo_id)
        )
        if removed.rowcount:
            logger.info("Photo unliked", extra={"event": "like", "photo_id": photo_id, "user_id": user_id})
            return False

        photo_exists = (
            await self.db.execute(select(Photo.id).where(Photo.id == photo_id))
        ).scalar_one_or_none()
        if photo_exists is None:
            raise NotFoundError("Photo not found")

        self.db.add(Like(user_id=user_id, photo_id=photo_id))
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            logger.info("Concurrent like resolved", extra={"event": "like", "photo_id": photo_id, "user_id": user_id})
            return True

        logger.info("Photo liked", extra={"event": "like", "photo_id": photo_id, "user_id": user_id})
        return True
