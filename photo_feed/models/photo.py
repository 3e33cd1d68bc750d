"""
Photo model for storing photo metadata.
The image file itself lives in the local file store and is referenced by URL.
"""
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photo_feed.database import Base

if TYPE_CHECKING:
    from photo_feed.models.like import Like


class Photo(Base):
    """
    Photo metadata.

    ``uploader`` is the uploader's username (denormalized, not a foreign key);
    renames rewrite it in the same transaction as the users row.
    ``tags`` holds a JSON array of strings.
    """

    __tablename__ = "photos"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    uploader: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    url: Mapped[str] = mapped_column(String(500), nullable=False)

    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, index=True
    )

    likes: Mapped[List["Like"]] = relationship(
        "Like", back_populates="photo", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Photo(id={self.id}, uploader={self.uploader})>"
