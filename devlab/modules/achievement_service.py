"""
Achievement awarding.

Each (user, achievement type, tool) key is unlocked at most once.
Repeated awards are silent no-ops and nothing is ever revoked.
"""

import enum
import logging
import uuid
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from common.models import Achievement

from .errors import StorageConflictError
from .user_service import ensure_user, require_identifier

logger = logging.getLogger(__name__)


class AchievementType(str, enum.Enum):
    """Achievement types fired by the learning flow."""

    FIRST_STEP = "first_step"
    TOOL_COMPLETION = "tool_completion"
    CODE_EXECUTION = "code_execution"


class AwardOutcome(NamedTuple):
    """Result of an award attempt."""

    achievement: Achievement
    created: bool


def generate_achievement_id() -> str:
    """Generate unique achievement ID."""
    return f"ach-{uuid.uuid4().hex[:12]}"


def describe(
    achievement_type: AchievementType,
    tool_name: Optional[str] = None
) -> tuple[str, str]:
    """
    Default display name and description for a built-in type.

    Args:
        achievement_type: Built-in achievement type
        tool_name: Tool display label used in descriptions

    Returns:
        tuple: (name, description)
    """
    label = tool_name or "a tool"
    if achievement_type is AchievementType.FIRST_STEP:
        return "First Steps", f"Started learning {label}"
    if achievement_type is AchievementType.TOOL_COMPLETION:
        return "Tool Master", f"Completed all steps for {label}"
    return "Code Runner", "Successfully executed code in the playground"


def _find_achievement(
    db: Session,
    user_id: str,
    achievement_type: str,
    tool_id: Optional[str]
) -> Optional[Achievement]:
    query = db.query(Achievement).filter(
        Achievement.user_id == user_id,
        Achievement.achievement_type == achievement_type
    )
    # NULLs are distinct for the unique constraint, so match them here
    if tool_id is None:
        query = query.filter(Achievement.tool_id.is_(None))
    else:
        query = query.filter(Achievement.tool_id == tool_id)
    return query.first()


def award_achievement(
    db: Session,
    user_id: str,
    achievement_type: str,
    name: str,
    description: str,
    tool_id: Optional[str] = None
) -> AwardOutcome:
    """
    Unlock an achievement unless the user already holds it.

    Args:
        db: Database session
        user_id: User identifier
        achievement_type: Achievement type
        name: Display name
        description: Human-readable description
        tool_id: Tool the achievement belongs to, if any

    Returns:
        AwardOutcome: the stored achievement and whether it was created
        by this call

    Raises:
        InvalidArgumentError: If user_id or achievement_type is empty
        StorageConflictError: If a racing insert cannot be re-read
    """
    require_identifier(user_id, "user_id")
    require_identifier(achievement_type, "achievement_type")
    if isinstance(achievement_type, AchievementType):
        achievement_type = achievement_type.value
    ensure_user(db, user_id)

    existing = _find_achievement(db, user_id, achievement_type, tool_id)
    if existing:
        return AwardOutcome(existing, False)

    achievement = Achievement(
        id=generate_achievement_id(),
        user_id=user_id,
        achievement_type=achievement_type,
        name=name,
        description=description,
        tool_id=tool_id,
        earned_at=datetime.now(timezone.utc)
    )
    db.add(achievement)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = _find_achievement(db, user_id, achievement_type, tool_id)
        if existing is None:
            raise StorageConflictError(
                f"Could not award {achievement_type} to {user_id}"
            )
        return AwardOutcome(existing, False)

    logger.info(
        f"Awarded {achievement_type} to {user_id}"
        + (f" for {tool_id}" if tool_id else "")
    )
    return AwardOutcome(achievement, True)


def award_builtin(
    db: Session,
    user_id: str,
    achievement_type: AchievementType,
    tool_id: Optional[str] = None,
    tool_name: Optional[str] = None
) -> AwardOutcome:
    """Award a built-in achievement with its default wording."""
    name, description = describe(achievement_type, tool_name)
    return award_achievement(
        db,
        user_id,
        achievement_type.value,
        name,
        description,
        tool_id
    )


def get_user_achievements(db: Session, user_id: str) -> list[Achievement]:
    """
    List a user's achievements, newest first.

    Args:
        db: Database session
        user_id: User identifier

    Returns:
        list: Achievement records
    """
    return db.query(Achievement).filter(
        Achievement.user_id == user_id
    ).order_by(Achievement.earned_at.desc()).all()
