"""
Achievement model for one-time learner unlocks.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .user import User


class Achievement(Base):
    """
    Achievement entity.

    Unique per (user, achievement type, tool). ``tool_id`` is NULL for
    achievements that are not tied to a tool.
    """

    __tablename__ = "achievements"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "achievement_type",
            "tool_id",
            name="uq_achievement_user_type_tool"
        ),
        # NULL tool_id never collides in the constraint above
        Index(
            "uq_achievement_user_type_no_tool",
            "user_id",
            "achievement_type",
            unique=True,
            sqlite_where=text("tool_id IS NULL"),
            postgresql_where=text("tool_id IS NULL")
        ),
    )

    id: Mapped[str] = mapped_column(
        String(50),
        primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    achievement_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    tool_id: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True
    )

    earned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="achievements"
    )

    def __repr__(self) -> str:
        return (
            f"<Achievement(user_id={self.user_id}, "
            f"type={self.achievement_type}, tool_id={self.tool_id})>"
        )
