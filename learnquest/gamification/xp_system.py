"""
XP and Leveling System

Leveling Curve:
- Flat: every 1000 XP is one level, starting at level 1

XP Award Rules:
- Quiz completion: the quiz score is awarded as XP
"""

from typing import Dict
import logging

from learnquest.exceptions import ValidationError

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 1000


def calculate_level_from_xp(total_xp: int) -> int:
    """Level for a total XP amount: floor(xp / 1000) + 1"""
    return total_xp // XP_PER_LEVEL + 1


def level_progress(total_xp: int) -> Dict[str, int]:
    """
    Break total XP down for a progress bar

    Returns:
        {
            'current_level': int,
            'xp_in_current_level': int,
            'xp_to_next_level': int,
            'total_xp_for_next_level': int
        }
    """
    level = calculate_level_from_xp(total_xp)
    xp_in_level = total_xp % XP_PER_LEVEL

    return {
        "current_level": level,
        "xp_in_current_level": xp_in_level,
        "xp_to_next_level": XP_PER_LEVEL - xp_in_level,
        "total_xp_for_next_level": level * XP_PER_LEVEL,
    }


def validate_xp_amount(amount: int) -> None:
    """XP is never taken away; reject anything that would lower it"""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError("XP amount must be an integer", field="amount", value=amount)
    if amount < 0:
        raise ValidationError("XP amount must be non-negative", field="amount", value=amount)
