"""
Code execution model: append-only audit log of playground runs.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .user import User


class CodeExecution(Base):
    """
    Code execution entity.

    Stores the raw submission along with its serialized validation
    verdict and simulated execution result. Rows are never updated.
    """

    __tablename__ = "code_executions"

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
    code: Mapped[str] = mapped_column(Text, nullable=False)
    validation_result: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False
    )
    execution_result: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False
    )
    success: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="code_executions"
    )

    def __repr__(self) -> str:
        return (
            f"<CodeExecution(id={self.id}, tool_id={self.tool_id}, "
            f"success={self.success})>"
        )
