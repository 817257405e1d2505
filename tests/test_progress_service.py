"""
Tests for progress tracking.
"""

import pytest

from common.models import ProgressStatus, ToolProgress
from modules import progress_service
from modules.errors import InvalidArgumentError, StorageConflictError
from modules.progress_service import (
    advance_progress,
    get_tool_progress,
    get_user_progress,
)


def test_first_step_creates_record(db):
    outcome = advance_progress(db, "u1", "docker", "Docker", 0, 3)

    progress = outcome.progress
    assert outcome.completed_now is False
    assert progress.status == ProgressStatus.IN_PROGRESS.value
    assert progress.completed_steps == [0]
    assert progress.current_step == 0
    assert progress.total_steps == 3
    assert progress.completed_at is None


def test_completing_every_step_marks_completed(db):
    advance_progress(db, "u1", "docker", "Docker", 0, 3)
    advance_progress(db, "u1", "docker", "Docker", 1, 3)
    outcome = advance_progress(db, "u1", "docker", "Docker", 2, 3)

    assert outcome.completed_now is True
    assert outcome.progress.status == ProgressStatus.COMPLETED.value
    assert outcome.progress.completed_steps == [0, 1, 2]
    assert outcome.progress.completed_at is not None


def test_steps_out_of_order_complete_once_covered(db):
    advance_progress(db, "u1", "helm", "Helm", 2, 3)
    advance_progress(db, "u1", "helm", "Helm", 0, 3)
    outcome = advance_progress(db, "u1", "helm", "Helm", 1, 3)

    assert outcome.completed_now
    assert outcome.progress.completed_steps == [0, 1, 2]


def test_repeated_step_is_idempotent(db):
    advance_progress(db, "u1", "docker", "Docker", 1, 3)
    outcome = advance_progress(db, "u1", "docker", "Docker", 1, 3)

    assert outcome.progress.completed_steps == [1]
    assert outcome.progress.status == ProgressStatus.IN_PROGRESS.value
    assert db.query(ToolProgress).count() == 1


def test_single_step_tool_completes_on_creation(db):
    outcome = advance_progress(db, "u1", "jenkins", "Jenkins", 0, 1)

    assert outcome.completed_now is True
    assert outcome.progress.status == ProgressStatus.COMPLETED.value
    assert outcome.progress.completed_at is not None


def test_completion_is_terminal(db):
    advance_progress(db, "u1", "docker", "Docker", 0, 2)
    finished = advance_progress(db, "u1", "docker", "Docker", 1, 2)
    completed_at = finished.progress.completed_at

    again = advance_progress(db, "u1", "docker", "Docker", 0, 2)

    assert again.completed_now is False
    assert again.progress.status == ProgressStatus.COMPLETED.value
    assert again.progress.completed_at == completed_at
    assert again.progress.current_step == 0


def test_stored_total_wins_over_later_values(db):
    advance_progress(db, "u1", "docker", "Docker", 0, 2)

    outcome = advance_progress(db, "u1", "docker", "Docker", 1, 10)

    assert outcome.progress.total_steps == 2
    assert outcome.completed_now is True


def test_step_beyond_stored_total_is_rejected(db):
    advance_progress(db, "u1", "docker", "Docker", 0, 2)

    with pytest.raises(InvalidArgumentError):
        advance_progress(db, "u1", "docker", "Docker", 5, 10)


@pytest.mark.parametrize(
    "step_index,total_steps",
    [(-1, 3), (3, 3), (0, 0), (0, -2)]
)
def test_invalid_arguments(db, step_index, total_steps):
    with pytest.raises(InvalidArgumentError):
        advance_progress(db, "u1", "docker", "Docker", step_index, total_steps)


@pytest.mark.parametrize("user_id,tool_id", [("", "docker"), ("u1", "  ")])
def test_empty_identifiers_rejected(db, user_id, tool_id):
    with pytest.raises(InvalidArgumentError):
        advance_progress(db, user_id, tool_id, "Docker", 0, 3)


def test_tool_name_is_kept_from_creation(db):
    advance_progress(db, "u1", "k8s", "Kubernetes", 0, 3)
    outcome = advance_progress(db, "u1", "k8s", "K8s", 1, 3)

    assert outcome.progress.tool_name == "Kubernetes"


def test_records_are_scoped_per_user(db):
    advance_progress(db, "u1", "docker", "Docker", 0, 3)
    advance_progress(db, "u2", "docker", "Docker", 0, 3)

    assert len(get_user_progress(db, "u1")) == 1
    assert len(get_user_progress(db, "u2")) == 1
    assert get_tool_progress(db, "u1", "helm") is None


def test_user_progress_orders_by_recent_activity(db):
    advance_progress(db, "u1", "docker", "Docker", 0, 3)
    advance_progress(db, "u1", "helm", "Helm", 0, 3)
    advance_progress(db, "u1", "docker", "Docker", 1, 3)

    tools = [record.tool_id for record in get_user_progress(db, "u1")]

    assert tools == ["docker", "helm"]


def test_concurrent_creation_retries_as_update(db, monkeypatch):
    advance_progress(db, "u1", "docker", "Docker", 0, 3)

    real_find = progress_service._find_progress
    calls = {"count": 0}

    def racing_find(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return real_find(*args, **kwargs)

    monkeypatch.setattr(progress_service, "_find_progress", racing_find)

    outcome = advance_progress(db, "u1", "docker", "Docker", 1, 3)

    assert outcome.progress.completed_steps == [0, 1]
    assert db.query(ToolProgress).count() == 1


def test_unresolvable_conflict_raises(db, monkeypatch):
    advance_progress(db, "u1", "docker", "Docker", 0, 3)
    monkeypatch.setattr(
        progress_service,
        "_find_progress",
        lambda *args, **kwargs: None
    )

    with pytest.raises(StorageConflictError):
        advance_progress(db, "u1", "docker", "Docker", 1, 3)
