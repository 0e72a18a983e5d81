"""Progress models for gamification"""
from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TopicProgress(BaseModel):
    """Best-score record for one curriculum topic"""
    topic_id: str
    score: int = Field(ge=0)
    completed_at: datetime


class AchievementDefinition(BaseModel):
    """Catalog entry; never changes at runtime"""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    icon: str


class Achievement(BaseModel):
    """A catalog entry as seen by one learner"""
    id: str
    title: str
    description: str
    icon: str
    unlocked_at: Optional[datetime] = None

    @property
    def is_unlocked(self) -> bool:
        return self.unlocked_at is not None


class AchievementUnlock(BaseModel):
    """Row of the user_achievements table"""
    achievement_id: str
    unlocked_at: datetime


class ProfileSnapshot(BaseModel):
    """Row of the profiles table"""
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    streak: int = Field(default=1, ge=1)
    last_login_date: date


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class LearnerProgress(BaseModel):
    """
    In-memory progress of a single learner.

    level is derived from xp; completed_topics holds one record per topic;
    achievement_unlocks only ever gains entries.
    """
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    streak: int = Field(default=1, ge=1)
    last_login_date: date = Field(default_factory=_utc_today)
    completed_topics: dict[str, TopicProgress] = Field(default_factory=dict)
    achievement_unlocks: dict[str, datetime] = Field(default_factory=dict)

    @model_validator(mode='after')
    def derive_level(self) -> "LearnerProgress":
        # Imported here; xp_system depends on nothing in models
        from learnquest.gamification.xp_system import calculate_level_from_xp
        self.level = calculate_level_from_xp(self.xp)
        return self

    @property
    def achievements(self) -> list[Achievement]:
        """Catalog joined with this learner's unlock times, in catalog order"""
        from learnquest.gamification.achievement_system import ACHIEVEMENT_CATALOG
        return [
            Achievement(
                **definition.model_dump(),
                unlocked_at=self.achievement_unlocks.get(definition.id),
            )
            for definition in ACHIEVEMENT_CATALOG.values()
        ]

    def to_profile(self) -> ProfileSnapshot:
        return ProfileSnapshot(
            xp=self.xp,
            level=self.level,
            streak=self.streak,
            last_login_date=self.last_login_date,
        )
