"""Pydantic models for learner progress"""

from learnquest.models.progress import (
    Achievement,
    AchievementDefinition,
    AchievementUnlock,
    LearnerProgress,
    ProfileSnapshot,
    TopicProgress,
)

__all__ = [
    "Achievement",
    "AchievementDefinition",
    "AchievementUnlock",
    "LearnerProgress",
    "ProfileSnapshot",
    "TopicProgress",
]
