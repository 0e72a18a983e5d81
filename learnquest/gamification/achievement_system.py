"""
Achievement System

The catalog is a fixed table keyed by achievement id. Learners only ever
gain an unlock time for an entry; the entries themselves never change.

Quiz rules:
- first_win: finishing any quiz
- streak_master: 7 correct answers in a row
- math_whiz: a perfect math quiz (10 points per question)
- science_pro: listed in the catalog, unlocked by callers directly
"""

from enum import Enum
from types import MappingProxyType
from typing import List, Mapping
import logging

from learnquest.models.progress import AchievementDefinition

logger = logging.getLogger(__name__)

POINTS_PER_QUESTION = 10
STREAK_MASTER_ANSWERS = 7


class AchievementId(str, Enum):
    """Known achievement ids"""
    FIRST_WIN = "first_win"
    MATH_WHIZ = "math_whiz"
    SCIENCE_PRO = "science_pro"
    STREAK_MASTER = "streak_master"


ACHIEVEMENT_CATALOG: Mapping[str, AchievementDefinition] = MappingProxyType({
    AchievementId.FIRST_WIN.value: AchievementDefinition(
        id=AchievementId.FIRST_WIN.value,
        title="First Victory",
        description="Complete your first lesson",
        icon="Trophy",
    ),
    AchievementId.MATH_WHIZ.value: AchievementDefinition(
        id=AchievementId.MATH_WHIZ.value,
        title="Math Whiz",
        description="Score 100% on a Math quiz",
        icon="Calculator",
    ),
    AchievementId.SCIENCE_PRO.value: AchievementDefinition(
        id=AchievementId.SCIENCE_PRO.value,
        title="Science Pro",
        description="Complete 3 Science topics",
        icon="Beaker",
    ),
    AchievementId.STREAK_MASTER.value: AchievementDefinition(
        id=AchievementId.STREAK_MASTER.value,
        title="Streak Master",
        description="Reach a 7-day streak",
        icon="Flame",
    ),
})


def _key(achievement_id) -> str:
    return achievement_id.value if isinstance(achievement_id, AchievementId) else str(achievement_id)


def is_known_achievement(achievement_id) -> bool:
    return _key(achievement_id) in ACHIEVEMENT_CATALOG


def get_achievement_definition(achievement_id) -> AchievementDefinition:
    """Look up a catalog entry; raises KeyError for unknown ids"""
    return ACHIEVEMENT_CATALOG[_key(achievement_id)]


def achievements_for_quiz(
    subject: str,
    score: int,
    answer_streak: int,
    question_count: int
) -> List[str]:
    """
    Achievements earned by finishing a quiz

    Args:
        subject: Subject of the quiz topic ('math', 'science', ...)
        score: Final quiz score
        answer_streak: Correct answers in a row at the end of the quiz
        question_count: Number of questions asked

    Returns:
        Achievement ids to unlock, in unlock order
    """
    earned = [AchievementId.FIRST_WIN.value]

    if answer_streak >= STREAK_MASTER_ANSWERS:
        earned.append(AchievementId.STREAK_MASTER.value)

    perfect = question_count > 0 and score >= question_count * POINTS_PER_QUESTION
    if subject.lower() == "math" and perfect:
        earned.append(AchievementId.MATH_WHIZ.value)

    logger.debug(f"Quiz on {subject} (score {score}) earns {earned}")
    return earned
