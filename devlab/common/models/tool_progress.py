"""
Tool progress model tracking a learner's advancement through one tool.
"""

import enum
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .user import User


class ProgressStatus(str, enum.Enum):
    """Lifecycle states of a tool progress record."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ToolProgress(Base):
    """
    Per-user, per-tool progress record.

    ``completed_steps`` is a sorted, deduplicated list of zero-based
    step indices. ``total_steps`` is fixed when the record is created.
    """

    __tablename__ = "tool_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "tool_id", name="uq_progress_user_tool"),
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
    tool_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True
    )
    tool_name: Mapped[str] = mapped_column(String(100), nullable=False)
    current_step: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0
    )
    total_steps: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_steps: Mapped[list[int]] = mapped_column(
        JSON,
        nullable=False,
        default=list
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ProgressStatus.IN_PROGRESS.value
    )

    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False
    )
    last_activity_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="progress"
    )

    @property
    def is_completed(self) -> bool:
        return self.status == ProgressStatus.COMPLETED.value

    def __repr__(self) -> str:
        return (
            f"<ToolProgress(user_id={self.user_id}, "
            f"tool_id={self.tool_id}, status={self.status})>"
        )
