"""
Progress tracking for tutorial step sequences.

A record exists per (user, tool) once the first step is submitted.
Steps accumulate in a deduplicated set; the record becomes completed
when every step of the sequence is covered, and completion is terminal.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from common.models import ProgressStatus, ToolProgress

from .errors import InvalidArgumentError, StorageConflictError
from .user_service import ensure_user, require_identifier

logger = logging.getLogger(__name__)


class AdvanceOutcome(NamedTuple):
    """Result of advancing a tool's progress."""

    progress: ToolProgress
    completed_now: bool


def generate_progress_id() -> str:
    """Generate unique progress record ID."""
    return f"prg-{uuid.uuid4().hex[:12]}"


def _validate_step(step_index: int, total_steps: int) -> None:
    if total_steps <= 0:
        raise InvalidArgumentError(
            f"total_steps must be positive, got {total_steps}"
        )
    if step_index < 0 or step_index >= total_steps:
        raise InvalidArgumentError(
            f"step_index must be in [0, {total_steps}), got {step_index}"
        )


def _find_progress(
    db: Session,
    user_id: str,
    tool_id: str,
    for_update: bool = False
) -> Optional[ToolProgress]:
    query = db.query(ToolProgress).filter(
        ToolProgress.user_id == user_id,
        ToolProgress.tool_id == tool_id
    )
    if for_update:
        query = query.with_for_update()
    return query.first()


def _apply_step(
    progress: ToolProgress,
    step_index: int,
    now: datetime
) -> bool:
    """Record a step on an existing record; return True on completion."""
    if step_index >= progress.total_steps:
        raise InvalidArgumentError(
            f"step_index {step_index} is outside the {progress.total_steps} "
            f"steps recorded for {progress.tool_id}"
        )

    steps = set(progress.completed_steps or [])
    steps.add(step_index)
    progress.completed_steps = sorted(steps)
    progress.current_step = step_index
    progress.last_activity_at = now

    if progress.is_completed:
        return False

    if len(steps) >= progress.total_steps:
        progress.status = ProgressStatus.COMPLETED.value
        progress.completed_at = now
        return True

    progress.status = ProgressStatus.IN_PROGRESS.value
    return False


def advance_progress(
    db: Session,
    user_id: str,
    tool_id: str,
    tool_name: str,
    step_index: int,
    total_steps: int
) -> AdvanceOutcome:
    """
    Mark a tutorial step as done for a user.

    Args:
        db: Database session
        user_id: User identifier
        tool_id: Tool identifier
        tool_name: Tool display label (stored on creation only)
        step_index: Zero-based step index
        total_steps: Length of the tool's step sequence

    Returns:
        AdvanceOutcome: the persisted record and whether this call
        moved it into the completed state

    Raises:
        InvalidArgumentError: On a bad step index, non-positive total,
            or empty identifiers
        StorageConflictError: If a concurrent creation cannot be merged

    Note:
        ``total_steps`` of later calls is not reconciled with the stored
        value; the value recorded at creation decides completion.
    """
    require_identifier(user_id, "user_id")
    require_identifier(tool_id, "tool_id")
    _validate_step(step_index, total_steps)
    ensure_user(db, user_id)

    now = datetime.now(timezone.utc)
    progress = _find_progress(db, user_id, tool_id, for_update=True)

    if progress is None:
        completed = total_steps == 1
        progress = ToolProgress(
            id=generate_progress_id(),
            user_id=user_id,
            tool_id=tool_id,
            tool_name=tool_name,
            current_step=step_index,
            total_steps=total_steps,
            completed_steps=[step_index],
            status=(
                ProgressStatus.COMPLETED.value if completed
                else ProgressStatus.IN_PROGRESS.value
            ),
            started_at=now,
            last_activity_at=now,
            completed_at=now if completed else None
        )
        db.add(progress)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                f"Concurrent progress creation for {user_id}/{tool_id}, "
                f"retrying as update"
            )
            progress = _find_progress(db, user_id, tool_id, for_update=True)
            if progress is None:
                raise StorageConflictError(
                    f"Could not create or load progress for "
                    f"{user_id}/{tool_id}"
                )
        else:
            logger.info(
                f"Started {tool_id} for {user_id} at step {step_index}"
            )
            return AdvanceOutcome(progress, completed)

    completed_now = _apply_step(progress, step_index, now)
    db.commit()

    logger.info(
        f"Advanced {tool_id} for {user_id}: step {step_index}, "
        f"{len(progress.completed_steps)}/{progress.total_steps} "
        f"({progress.status})"
    )
    return AdvanceOutcome(progress, completed_now)


def get_user_progress(db: Session, user_id: str) -> list[ToolProgress]:
    """
    List a user's progress records, most recent activity first.

    Args:
        db: Database session
        user_id: User identifier

    Returns:
        list: ToolProgress records
    """
    return db.query(ToolProgress).filter(
        ToolProgress.user_id == user_id
    ).order_by(ToolProgress.last_activity_at.desc()).all()


def get_tool_progress(
    db: Session,
    user_id: str,
    tool_id: str
) -> Optional[ToolProgress]:
    """
    Retrieve a single progress record.

    Args:
        db: Database session
        user_id: User identifier
        tool_id: Tool identifier

    Returns:
        ToolProgress instance or None (the tool is not started)
    """
    return _find_progress(db, user_id, tool_id)
