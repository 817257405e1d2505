"""
Tests for achievement awarding.
"""

import pytest

from common.models import Achievement
from modules import achievement_service
from modules.achievement_service import (
    AchievementType,
    award_achievement,
    award_builtin,
    describe,
    get_user_achievements,
)
from modules.errors import InvalidArgumentError, StorageConflictError


def test_award_creates_once(db):
    first = award_achievement(db, "u1", "first_step", "First Steps", "Started", "docker")
    second = award_achievement(db, "u1", "first_step", "Other", "Other", "docker")

    assert first.created is True
    assert second.created is False
    assert second.achievement.id == first.achievement.id
    assert second.achievement.name == "First Steps"
    assert db.query(Achievement).count() == 1


def test_award_without_tool_is_deduplicated(db):
    award_achievement(db, "u1", "streak", "Streak", "Three days in a row")
    repeat = award_achievement(db, "u1", "streak", "Streak", "Three days in a row")

    assert repeat.created is False
    assert db.query(Achievement).count() == 1


def test_same_type_on_other_tool_is_new(db):
    award_builtin(db, "u1", AchievementType.FIRST_STEP, "docker", "Docker")
    outcome = award_builtin(db, "u1", AchievementType.FIRST_STEP, "helm", "Helm")

    assert outcome.created is True
    assert len(get_user_achievements(db, "u1")) == 2


def test_achievements_are_scoped_per_user(db):
    award_builtin(db, "u1", AchievementType.CODE_EXECUTION, "docker")
    outcome = award_builtin(db, "u2", AchievementType.CODE_EXECUTION, "docker")

    assert outcome.created is True
    assert len(get_user_achievements(db, "u1")) == 1


def test_builtin_wording():
    assert describe(AchievementType.FIRST_STEP, "Docker") == (
        "First Steps",
        "Started learning Docker",
    )
    assert describe(AchievementType.TOOL_COMPLETION, "Helm") == (
        "Tool Master",
        "Completed all steps for Helm",
    )
    assert describe(AchievementType.CODE_EXECUTION)[0] == "Code Runner"


def test_enum_type_is_stored_as_value(db):
    outcome = award_achievement(
        db,
        "u1",
        AchievementType.TOOL_COMPLETION,
        "Tool Master",
        "Completed all steps for Docker",
        "docker"
    )

    assert outcome.achievement.achievement_type == "tool_completion"


@pytest.mark.parametrize("user_id,achievement_type", [("", "x"), ("u1", "")])
def test_empty_identifiers_rejected(db, user_id, achievement_type):
    with pytest.raises(InvalidArgumentError):
        award_achievement(db, user_id, achievement_type, "Name", "Description")


def test_concurrent_award_returns_existing(db, monkeypatch):
    original = award_builtin(db, "u1", AchievementType.FIRST_STEP, "docker", "Docker")

    real_find = achievement_service._find_achievement
    calls = {"count": 0}

    def racing_find(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return real_find(*args, **kwargs)

    monkeypatch.setattr(achievement_service, "_find_achievement", racing_find)

    outcome = award_builtin(db, "u1", AchievementType.FIRST_STEP, "docker", "Docker")

    assert outcome.created is False
    assert outcome.achievement.id == original.achievement.id
    assert db.query(Achievement).count() == 1


def test_unresolvable_award_conflict_raises(db, monkeypatch):
    award_builtin(db, "u1", AchievementType.FIRST_STEP, "docker", "Docker")
    monkeypatch.setattr(
        achievement_service,
        "_find_achievement",
        lambda *args, **kwargs: None
    )

    with pytest.raises(StorageConflictError):
        award_builtin(db, "u1", AchievementType.FIRST_STEP, "docker", "Docker")


def test_concurrent_award_without_tool_stored_once(db, monkeypatch):
    original = award_achievement(db, "u1", "streak", "Streak", "Three days in a row")
    monkeypatch.setattr(
        achievement_service,
        "_find_achievement",
        _miss_first_lookup(achievement_service._find_achievement)
    )

    outcome = award_achievement(db, "u1", "streak", "Streak", "Three days in a row")

    assert outcome.created is False
    assert outcome.achievement.id == original.achievement.id
    assert db.query(Achievement).count() == 1


def _miss_first_lookup(real_find):
    calls = {"count": 0}

    def racing_find(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return real_find(*args, **kwargs)

    return racing_find
