"""Unit tests for Achievement System (learnquest/gamification/achievement_system.py)"""
import pytest
from pydantic import ValidationError as PydanticValidationError

from learnquest.gamification.achievement_system import (
    ACHIEVEMENT_CATALOG,
    AchievementId,
    achievements_for_quiz,
    get_achievement_definition,
    is_known_achievement,
)


# ============================================================================
# Catalog Tests
# ============================================================================

def test_catalog_contains_every_achievement_id():
    assert set(ACHIEVEMENT_CATALOG) == {a.value for a in AchievementId}


def test_catalog_entries():
    first_win = ACHIEVEMENT_CATALOG["first_win"]

    assert first_win.title == "First Victory"
    assert first_win.description == "Complete your first lesson"
    assert first_win.icon == "Trophy"
    assert ACHIEVEMENT_CATALOG["streak_master"].icon == "Flame"


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        ACHIEVEMENT_CATALOG["new_one"] = ACHIEVEMENT_CATALOG["first_win"]


def test_catalog_definitions_are_frozen():
    with pytest.raises(PydanticValidationError):
        ACHIEVEMENT_CATALOG["first_win"].title = "Changed"


def test_is_known_achievement():
    assert is_known_achievement("math_whiz") is True
    assert is_known_achievement(AchievementId.SCIENCE_PRO) is True
    assert is_known_achievement("speed_demon") is False


def test_get_achievement_definition_by_enum_and_string():
    assert get_achievement_definition(AchievementId.MATH_WHIZ) is get_achievement_definition("math_whiz")

    with pytest.raises(KeyError):
        get_achievement_definition("speed_demon")


# ============================================================================
# Quiz Rule Tests
# ============================================================================

def test_any_finished_quiz_earns_first_win():
    assert achievements_for_quiz("science", 20, 1, 5) == ["first_win"]


def test_seven_correct_in_a_row_earns_streak_master():
    earned = achievements_for_quiz("science", 70, 7, 10)

    assert "streak_master" in earned


def test_six_correct_in_a_row_is_not_enough():
    assert "streak_master" not in achievements_for_quiz("science", 60, 6, 10)


def test_perfect_math_quiz_earns_math_whiz():
    earned = achievements_for_quiz("Math", 50, 2, 5)

    assert earned == ["first_win", "math_whiz"]


def test_imperfect_math_quiz_does_not_earn_math_whiz():
    assert "math_whiz" not in achievements_for_quiz("math", 40, 2, 5)


def test_perfect_science_quiz_does_not_earn_math_whiz():
    assert "math_whiz" not in achievements_for_quiz("science", 50, 2, 5)


def test_empty_quiz_does_not_earn_math_whiz():
    assert "math_whiz" not in achievements_for_quiz("math", 0, 0, 0)
