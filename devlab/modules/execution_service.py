"""
Playground execution history and learner statistics.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from common.models import Achievement, CodeExecution, ProgressStatus, ToolProgress
from common.schemas import ExecutionResult, OverallStatsData, ValidationVerdict

from .errors import InvalidArgumentError
from .user_service import ensure_user, require_identifier

logger = logging.getLogger(__name__)


def generate_execution_id() -> str:
    """Generate unique code execution ID."""
    return f"exe-{uuid.uuid4().hex[:12]}"


def record_code_execution(
    db: Session,
    user_id: str,
    tool_id: str,
    code: str,
    verdict: ValidationVerdict,
    result: ExecutionResult
) -> CodeExecution:
    """
    Append a playground run to the user's history.

    Args:
        db: Database session
        user_id: User identifier
        tool_id: Tool identifier
        code: Raw submission
        verdict: Validation verdict for the submission
        result: Simulated execution result

    Returns:
        Created code execution instance
    """
    require_identifier(user_id, "user_id")
    require_identifier(tool_id, "tool_id")
    ensure_user(db, user_id)

    execution = CodeExecution(
        id=generate_execution_id(),
        user_id=user_id,
        tool_id=tool_id,
        code=code,
        validation_result=verdict.model_dump(),
        execution_result=result.model_dump(),
        success=result.success,
        created_at=datetime.now(timezone.utc)
    )
    db.add(execution)
    db.commit()

    logger.info(
        f"Recorded {tool_id} execution {execution.id} for {user_id}: "
        f"{'success' if result.success else 'failed'}"
    )
    return execution


def get_user_code_executions(
    db: Session,
    user_id: str,
    limit: int = 50
) -> list[CodeExecution]:
    """
    List a user's most recent playground runs, newest first.

    Args:
        db: Database session
        user_id: User identifier
        limit: Maximum number of rows

    Returns:
        list: CodeExecution records

    Raises:
        InvalidArgumentError: If limit is not positive
    """
    if limit <= 0:
        raise InvalidArgumentError(f"limit must be positive, got {limit}")

    return db.query(CodeExecution).filter(
        CodeExecution.user_id == user_id
    ).order_by(CodeExecution.created_at.desc()).limit(limit).all()


def get_overall_stats(db: Session, user_id: str) -> OverallStatsData:
    """
    Summarize a user's progress, achievements and playground runs.

    Args:
        db: Database session
        user_id: User identifier

    Returns:
        OverallStatsData: Aggregate counters
    """
    statuses = [
        row.status for row in db.query(ToolProgress.status).filter(
            ToolProgress.user_id == user_id
        )
    ]
    total_achievements = db.query(Achievement).filter(
        Achievement.user_id == user_id
    ).count()
    outcomes = [
        row.success for row in db.query(CodeExecution.success).filter(
            CodeExecution.user_id == user_id
        )
    ]

    total_executions = len(outcomes)
    successful_executions = sum(1 for success in outcomes if success)
    success_rate = (
        round(successful_executions / total_executions * 100)
        if total_executions else 0
    )

    return OverallStatsData(
        total_tools=len(statuses),
        completed_tools=statuses.count(ProgressStatus.COMPLETED.value),
        in_progress_tools=statuses.count(ProgressStatus.IN_PROGRESS.value),
        total_achievements=total_achievements,
        successful_executions=successful_executions,
        total_executions=total_executions,
        success_rate=success_rate
    )
