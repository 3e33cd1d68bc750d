"""
Like model: presence of a (user, photo) row means the user liked the photo.
"""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photo_feed.database import Base

if TYPE_CHECKING:
    from photo_feed.models.user import User
    from photo_feed.models.photo import Photo


class Like(Base):
    """
    Association between User and Photo.
    The composite primary key makes the pair unique.
    """

    __tablename__ = "likes"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    photo_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("photos.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    user: Mapped["User"] = relationship("User", back_populates="likes")
    photo: Mapped["Photo"] = relationship("Photo", back_populates="likes")

    def __repr__(self) -> str:
        return f"<Like(user_id={self.user_id}, photo_id={self.photo_id})>"
