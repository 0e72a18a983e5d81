"""Unit tests for XP and Leveling System (learnquest/gamification/xp_system.py)"""
import pytest

from learnquest.exceptions import ValidationError
from learnquest.gamification.xp_system import (
    XP_PER_LEVEL,
    calculate_level_from_xp,
    level_progress,
    validate_xp_amount,
)


# ============================================================================
# Level Calculation Tests
# ============================================================================

@pytest.mark.parametrize(
    "total_xp, expected_level",
    [(0, 1), (450, 1), (999, 1), (1000, 2), (1050, 2), (1999, 2), (2000, 3), (25_300, 26)],
)
def test_calculate_level_from_xp(total_xp, expected_level):
    """Level is floor(xp / 1000) + 1"""
    assert calculate_level_from_xp(total_xp) == expected_level


def test_level_progress_mid_level():
    """Test progress bar breakdown inside a level"""
    result = level_progress(1050)

    assert result["current_level"] == 2
    assert result["xp_in_current_level"] == 50
    assert result["xp_to_next_level"] == 950
    assert result["total_xp_for_next_level"] == 2000


def test_level_progress_exact_boundary():
    """Test reaching a level exactly starts it at zero"""
    result = level_progress(XP_PER_LEVEL)

    assert result["current_level"] == 2
    assert result["xp_in_current_level"] == 0
    assert result["xp_to_next_level"] == XP_PER_LEVEL


# ============================================================================
# Amount Validation Tests
# ============================================================================

def test_validate_xp_amount_accepts_zero_and_positive():
    validate_xp_amount(0)
    validate_xp_amount(600)


def test_validate_xp_amount_rejects_negative():
    with pytest.raises(ValidationError) as exc_info:
        validate_xp_amount(-5)

    assert exc_info.value.field == "amount"
    assert exc_info.value.value == -5


@pytest.mark.parametrize("amount", [1.5, "10", True, None])
def test_validate_xp_amount_rejects_non_integers(amount):
    with pytest.raises(ValidationError):
        validate_xp_amount(amount)
