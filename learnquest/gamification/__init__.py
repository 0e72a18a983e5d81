"""
Gamification rules for LearnQuest

This module implements the rules behind a learner's progress:
- XP and leveling (1000 XP per level)
- Daily visit streaks
- Fixed achievement catalog and quiz unlock rules
"""

from learnquest.gamification.xp_system import calculate_level_from_xp, level_progress
from learnquest.gamification.streak_system import day_difference, evaluate_streak
from learnquest.gamification.achievement_system import (
    ACHIEVEMENT_CATALOG,
    AchievementId,
    achievements_for_quiz,
    is_known_achievement,
)

__all__ = [
    "calculate_level_from_xp",
    "level_progress",
    "day_difference",
    "evaluate_streak",
    "ACHIEVEMENT_CATALOG",
    "AchievementId",
    "achievements_for_quiz",
    "is_known_achievement",
]
