"""
User bookkeeping for learner-owned records.

Users are created lazily the first time they write anything; the
identity layer owns authentication and profiles.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from common.models import User

from .errors import InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)


def require_identifier(value: str, field_name: str) -> str:
    """
    Reject empty identifiers.

    Raises:
        InvalidArgumentError: If the value is empty or blank
    """
    if not value or not value.strip():
        raise InvalidArgumentError(f"{field_name} must not be empty")
    return value


def ensure_user(db: Session, user_id: str) -> User:
    """
    Return the user row, creating it on first use.

    Args:
        db: Database session
        user_id: Identifier supplied by the identity layer

    Returns:
        User: Existing or newly created user
    """
    require_identifier(user_id, "user_id")
    user = db.get(User, user_id)
    if user:
        return user

    user = User(user_id=user_id)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # created concurrently by another request
        db.rollback()
        user = db.get(User, user_id)
        if user is None:
            raise
        return user

    logger.info(f"Registered user {user_id}")
    return user


def delete_user(db: Session, user_id: str) -> None:
    """
    Delete a user and every record they own.

    Args:
        db: Database session
        user_id: User identifier

    Raises:
        NotFoundError: If the user does not exist
    """
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(f"User {user_id} not found")

    db.delete(user)
    db.commit()
    logger.info(f"Deleted user {user_id} and owned records")
