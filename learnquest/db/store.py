"""
Progress stores - the remote side of a learner's progress

The progression engine talks to a store through ProgressStore only.
Writes are keyed upserts: one topic row per (learner, topic) and one
unlock row per (learner, achievement).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Optional, Protocol, TypeVar, runtime_checkable

import psycopg

from learnquest.db import queries
from learnquest.db.connection import Database
from learnquest.exceptions import wrap_external_exception
from learnquest.models.progress import AchievementUnlock, ProfileSnapshot, TopicProgress

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class ProgressStore(Protocol):
    """Remote persistence used by the progression engine"""

    async def get_learner_identity(self) -> Optional[str]:
        ...

    async def read_profile(self, identity: str) -> Optional[ProfileSnapshot]:
        ...

    async def read_completed_topics(self, identity: str) -> list[TopicProgress]:
        ...

    async def read_unlocked_achievements(self, identity: str) -> list[AchievementUnlock]:
        ...

    async def write_profile(self, identity: str, fields: dict[str, Any]) -> None:
        ...

    async def upsert_completed_topic(
        self, identity: str, topic_id: str, score: int, completed_at: datetime
    ) -> None:
        ...

    async def upsert_achievement_unlock(
        self, identity: str, achievement_id: str, unlocked_at: datetime
    ) -> None:
        ...


class PostgresProgressStore:
    """
    ProgressStore backed by PostgreSQL.

    learner_id is the authenticated learner of the session; None means an
    anonymous or demo session, for which nothing is read or written.

    psycopg errors are re-raised as ConnectionError or QueryError.
    """

    def __init__(self, database: Database, learner_id: Optional[str] = None):
        self.database = database
        self.learner_id = learner_id
        logger.debug(f"PostgresProgressStore initialized for learner {learner_id}")

    async def _run(self, operation: str, identity: str, query: Awaitable[T]) -> T:
        try:
            return await query
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation=operation, learner_id=identity) from e

    async def get_learner_identity(self) -> Optional[str]:
        return self.learner_id

    async def read_profile(self, identity: str) -> Optional[ProfileSnapshot]:
        row = await self._run(
            "read_profile", identity,
            queries.get_profile(identity, database=self.database),
        )
        return ProfileSnapshot(**row) if row else None

    async def read_completed_topics(self, identity: str) -> list[TopicProgress]:
        rows = await self._run(
            "read_completed_topics", identity,
            queries.get_completed_topics(identity, database=self.database),
        )
        return [TopicProgress(**row) for row in rows]

    async def read_unlocked_achievements(self, identity: str) -> list[AchievementUnlock]:
        rows = await self._run(
            "read_unlocked_achievements", identity,
            queries.get_unlocked_achievements(identity, database=self.database),
        )
        return [AchievementUnlock(**row) for row in rows]

    async def write_profile(self, identity: str, fields: dict[str, Any]) -> None:
        await self._run(
            "write_profile", identity,
            queries.update_profile(identity, fields, database=self.database),
        )

    async def upsert_completed_topic(
        self, identity: str, topic_id: str, score: int, completed_at: datetime
    ) -> None:
        await self._run(
            "upsert_completed_topic", identity,
            queries.upsert_completed_topic(
                identity, topic_id, score, completed_at, database=self.database
            ),
        )

    async def upsert_achievement_unlock(
        self, identity: str, achievement_id: str, unlocked_at: datetime
    ) -> None:
        await self._run(
            "upsert_achievement_unlock", identity,
            queries.upsert_achievement_unlock(
                identity, achievement_id, unlocked_at, database=self.database
            ),
        )


class InMemoryProgressStore:
    """
    Dict-backed ProgressStore for demo sessions and tests.

    Follows the same upsert rules as the SQL in learnquest.db.queries.
    """

    def __init__(self, learner_id: Optional[str] = None):
        self.learner_id = learner_id
        self.profiles: dict[str, dict[str, Any]] = {}
        self.topics: dict[tuple[str, str], TopicProgress] = {}
        self.unlocks: dict[tuple[str, str], datetime] = {}

    async def get_learner_identity(self) -> Optional[str]:
        return self.learner_id

    async def read_profile(self, identity: str) -> Optional[ProfileSnapshot]:
        row = self.profiles.get(identity)
        if row is None:
            return None
        return ProfileSnapshot(
            xp=row.get("xp", 0),
            level=row.get("level", 1),
            streak=row.get("streak", 1),
            last_login_date=row.get("last_login_date", datetime.now(timezone.utc).date()),
        )

    async def read_completed_topics(self, identity: str) -> list[TopicProgress]:
        return [
            topic for (user_id, _), topic in self.topics.items()
            if user_id == identity
        ]

    async def read_unlocked_achievements(self, identity: str) -> list[AchievementUnlock]:
        return [
            AchievementUnlock(achievement_id=achievement_id, unlocked_at=unlocked_at)
            for (user_id, achievement_id), unlocked_at in self.unlocks.items()
            if user_id == identity
        ]

    async def write_profile(self, identity: str, fields: dict[str, Any]) -> None:
        unknown = set(fields) - set(queries.PROFILE_COLUMNS)
        if unknown:
            raise ValueError(f"Not a profile progress column: {', '.join(sorted(unknown))}")
        self.profiles.setdefault(identity, {}).update(fields)

    async def upsert_completed_topic(
        self, identity: str, topic_id: str, score: int, completed_at: datetime
    ) -> None:
        key = (identity, topic_id)
        existing = self.topics.get(key)
        if existing is None or existing.score < score:
            self.topics[key] = TopicProgress(
                topic_id=topic_id, score=score, completed_at=completed_at
            )

    async def upsert_achievement_unlock(
        self, identity: str, achievement_id: str, unlocked_at: datetime
    ) -> None:
        self.unlocks.setdefault((identity, achievement_id), unlocked_at)
