"""
User model for accounts, credentials and profile pictures.
"""
from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photo_feed.database import Base

if TYPE_CHECKING:
    from photo_feed.models.like import Like


class User(Base):
    """
    User account.

    Password and recovery answer are stored as bcrypt hashes only; the recovery
    question is stored as-is because it is shown back on a failed login.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # UNIQUE 제약이 최종 판정 (가입/이름 변경 경쟁 시)
    username: Mapped[str] = mapped_column(
        String(100), unique=True, index=True, nullable=False
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    question: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    hashed_answer: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_pic: Mapped[str] = mapped_column(String(500), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    likes: Mapped[List["Like"]] = relationship(
        "Like", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
