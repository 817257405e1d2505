"""
Tests for execution history, overall stats and user removal.
"""

import pytest

from common.models import Achievement, CodeExecution, ToolProgress, User
from common.schemas import ExecutionResult, ValidationVerdict
from modules.achievement_service import AchievementType, award_builtin
from modules.errors import InvalidArgumentError, NotFoundError
from modules.execution_service import (
    get_overall_stats,
    get_user_code_executions,
    record_code_execution,
)
from modules.progress_service import advance_progress
from modules.user_service import delete_user, ensure_user


def _record(db, user_id, success, code="FROM node:16"):
    verdict = ValidationVerdict(errors=[] if success else ["Missing CMD or ENTRYPOINT instruction."])
    result = ExecutionResult(
        success=success,
        output="ok" if success else "failed",
        execution_time_ms=120
    )
    return record_code_execution(db, user_id, "docker", code, verdict, result)


def test_record_stores_verdict_and_result(db):
    execution = _record(db, "u1", success=False)

    stored = db.get(CodeExecution, execution.id)
    assert stored.success is False
    assert stored.validation_result["errors"] == [
        "Missing CMD or ENTRYPOINT instruction."
    ]
    assert stored.validation_result["is_valid"] is False
    assert stored.execution_result["execution_time_ms"] == 120


def test_history_is_newest_first_and_limited(db):
    for i in range(3):
        _record(db, "u1", success=True, code=f"run {i}")

    history = get_user_code_executions(db, "u1", limit=2)

    assert [item.code for item in history] == ["run 2", "run 1"]


def test_history_rejects_non_positive_limit(db):
    with pytest.raises(InvalidArgumentError):
        get_user_code_executions(db, "u1", limit=0)


def test_stats_for_new_user_are_zero(db):
    stats = get_overall_stats(db, "nobody")

    assert stats.total_tools == 0
    assert stats.total_executions == 0
    assert stats.success_rate == 0


def test_stats_aggregate_every_source(db):
    advance_progress(db, "u1", "docker", "Docker", 0, 1)
    advance_progress(db, "u1", "helm", "Helm", 0, 3)
    award_builtin(db, "u1", AchievementType.FIRST_STEP, "docker", "Docker")
    _record(db, "u1", success=True)
    _record(db, "u1", success=True)
    _record(db, "u1", success=False)

    stats = get_overall_stats(db, "u1")

    assert stats.total_tools == 2
    assert stats.completed_tools == 1
    assert stats.in_progress_tools == 1
    assert stats.total_achievements == 1
    assert stats.total_executions == 3
    assert stats.successful_executions == 2
    assert stats.success_rate == 67


def test_ensure_user_is_idempotent(db):
    first = ensure_user(db, "u1")
    second = ensure_user(db, "u1")

    assert first is second
    assert db.query(User).count() == 1


def test_delete_user_removes_owned_records(db):
    advance_progress(db, "u1", "docker", "Docker", 0, 3)
    award_builtin(db, "u1", AchievementType.FIRST_STEP, "docker", "Docker")
    _record(db, "u1", success=True)
    _record(db, "u2", success=True)

    delete_user(db, "u1")

    assert db.get(User, "u1") is None
    assert db.query(ToolProgress).count() == 0
    assert db.query(Achievement).count() == 0
    assert db.query(CodeExecution).filter(CodeExecution.user_id == "u2").count() == 1
    assert db.query(CodeExecution).count() == 1


def test_delete_missing_user_raises(db):
    with pytest.raises(NotFoundError):
        delete_user(db, "ghost")
