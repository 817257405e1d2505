"""
User model anchoring every learner-owned record.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base

if TYPE_CHECKING:
    from .achievement import Achievement
    from .code_execution import CodeExecution
    from .tool_progress import ToolProgress


class User(Base):
    """
    Learner identity as supplied by the external identity layer.

    Only the identifier is stored here; deleting a user cascades to
    progress, achievements and code execution history.
    """

    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Relationships
    progress: Mapped[list["ToolProgress"]] = relationship(
        "ToolProgress",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    achievements: Mapped[list["Achievement"]] = relationship(
        "Achievement",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    code_executions: Mapped[list["CodeExecution"]] = relationship(
        "CodeExecution",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id})>"
