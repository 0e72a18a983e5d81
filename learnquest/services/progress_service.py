"""
ProgressionEngine - Learner Progress Business Logic

Owns one learner's XP, level, streak, topic scores and achievement unlocks.

Every mutation is applied to the in-memory snapshot right away and the
matching write-back is started as an asyncio task. The task is returned so
callers can await it, but nothing has to: write failures are logged and
counted, never raised, and the in-memory change is never rolled back.
"""

import asyncio
import logging
from datetime import date, datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union
from zoneinfo import ZoneInfo

from learnquest.config import STREAK_TIMEZONE
from learnquest.db.store import ProgressStore
from learnquest.exceptions import HydrationError, PersistenceError, ValidationError
from learnquest.gamification.achievement_system import (
    AchievementId,
    achievements_for_quiz,
    is_known_achievement,
)
from learnquest.gamification.streak_system import evaluate_streak
from learnquest.gamification.xp_system import calculate_level_from_xp, validate_xp_amount
from learnquest.models.progress import LearnerProgress, TopicProgress
from learnquest.observability.metrics import (
    record_achievement_unlock,
    record_hydration,
    record_level_up,
    record_write,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class WriteStatus(str, Enum):
    """Outcome of a write-back task"""
    PERSISTED = "persisted"
    SKIPPED = "skipped"  # no authenticated learner
    FAILED = "failed"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProgressionEngine:
    """
    Progress state holder for a single learner session.

    Responsibilities:
    - Apply XP, topic, achievement and streak mutations in memory
    - Start one write-back per effective mutation
    - Hydrate the snapshot from the store on a best-effort basis

    Mutations must be called from code running inside an event loop.
    """

    def __init__(
        self,
        store: ProgressStore,
        progress: Optional[LearnerProgress] = None,
        clock: Optional[Clock] = None,
        streak_timezone: Optional[Union[str, ZoneInfo]] = None,
    ):
        """
        Initialize ProgressionEngine.

        Args:
            store: Remote persistence for this learner
            progress: Starting snapshot (defaults to a fresh learner)
            clock: Returns the current time as an aware datetime
            streak_timezone: Zone whose calendar days count for streaks
        """
        self.store = store
        self._clock = clock or _utc_now
        tz = streak_timezone or STREAK_TIMEZONE
        self._zone = tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)
        self.progress = progress if progress is not None else LearnerProgress(last_login_date=self.today())
        self.last_persistence_error: Optional[PersistenceError] = None
        self.last_hydration_error: Optional[HydrationError] = None
        self._pending: set[asyncio.Task] = set()
        logger.debug("ProgressionEngine initialized")

    # ==========================================
    # Time
    # ==========================================

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        """Current calendar date in the streak timezone"""
        return self._clock().astimezone(self._zone).date()

    # ==========================================
    # Hydration
    # ==========================================

    async def fetch_progress(self) -> bool:
        """
        Replace the in-memory snapshot with the stored one.

        Returns:
            True when the snapshot was replaced. On a missing identity or any
            read failure the current snapshot is kept and False is returned;
            a read failure is also kept on last_hydration_error.
        """
        try:
            identity = await self.store.get_learner_identity()
        except Exception as e:
            self.last_hydration_error = HydrationError(f"Could not resolve learner identity: {e}", cause=e)
            record_hydration("failed")
            return False

        if identity is None:
            logger.debug("No authenticated learner; keeping local progress")
            record_hydration("anonymous")
            return False

        try:
            profile, topics, unlocks = await asyncio.gather(
                self.store.read_profile(identity),
                self.store.read_completed_topics(identity),
                self.store.read_unlocked_achievements(identity),
            )
        except Exception as e:
            self.last_hydration_error = HydrationError(
                f"Could not load progress: {e}",
                learner_id=identity,
                cause=e,
            )
            record_hydration("failed")
            return False

        current = self.progress
        xp = profile.xp if profile else current.xp
        level = calculate_level_from_xp(xp)
        if profile and profile.level != level:
            logger.warning(
                f"Stored level {profile.level} does not match {xp} XP for learner {identity}; "
                f"using level {level}"
            )

        completed: dict[str, TopicProgress] = {}
        for topic in topics:
            existing = completed.get(topic.topic_id)
            if existing is None or topic.score > existing.score:
                completed[topic.topic_id] = topic

        unlocked: dict[str, datetime] = {}
        for unlock in unlocks:
            if not is_known_achievement(unlock.achievement_id):
                logger.debug(f"Ignoring unknown achievement {unlock.achievement_id}")
                continue
            first = unlocked.get(unlock.achievement_id)
            if first is None or unlock.unlocked_at < first:
                unlocked[unlock.achievement_id] = unlock.unlocked_at

        self.progress = LearnerProgress(
            xp=xp,
            level=level,
            streak=profile.streak if profile else current.streak,
            last_login_date=profile.last_login_date if profile else current.last_login_date,
            completed_topics=completed,
            achievement_unlocks=unlocked,
        )
        record_hydration("loaded")
        logger.info(
            f"Loaded progress for learner {identity}: {xp} XP, level {level}, "
            f"{len(completed)} topics, {len(unlocked)} achievements"
        )
        return True

    # ==========================================
    # Mutations
    # ==========================================

    def add_xp(self, amount: int) -> asyncio.Task:
        """
        Award XP and recompute the level.

        Level-ups are not announced; compare progress.level before and after.

        Returns:
            Task persisting {'xp', 'level'}
        """
        validate_xp_amount(amount)
        loop = asyncio.get_running_loop()

        old_level = self.progress.level
        new_xp = self.progress.xp + amount
        new_level = calculate_level_from_xp(new_xp)
        self.progress.xp = new_xp
        self.progress.level = new_level

        logger.info(f"Awarded {amount} XP. Total: {new_xp} XP, Level: {new_level}")
        if new_level > old_level:
            record_level_up(new_level - old_level)
            logger.info(f"Leveled up from {old_level} to {new_level}!")

        fields = {"xp": new_xp, "level": new_level}
        return self._dispatch(
            loop,
            "write_profile",
            lambda identity: self.store.write_profile(identity, fields),
        )

    def complete_topic(self, topic_id: str, score: int) -> Optional[asyncio.Task]:
        """
        Record a topic result; only a strictly higher score replaces a stored one.

        Returns:
            Task persisting the topic upsert, or None when the score did not beat
            the stored one
        """
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            raise ValidationError("Score must be a non-negative integer", field="score", value=score)

        existing = self.progress.completed_topics.get(topic_id)
        if existing is not None and existing.score >= score:
            logger.debug(f"Keeping best score {existing.score} for topic {topic_id} (got {score})")
            return None

        loop = asyncio.get_running_loop()
        record = TopicProgress(topic_id=topic_id, score=score, completed_at=self.now())
        self.progress.completed_topics[topic_id] = record
        logger.info(f"Topic {topic_id} completed with score {score}")

        return self._dispatch(
            loop,
            "upsert_completed_topic",
            lambda identity: self.store.upsert_completed_topic(
                identity, record.topic_id, record.score, record.completed_at
            ),
        )

    def unlock_achievement(self, achievement_id: Union[str, AchievementId]) -> Optional[asyncio.Task]:
        """
        Unlock a catalog achievement once.

        Unknown ids and repeat unlocks are silently ignored.

        Returns:
            Task persisting the unlock, or None for a no-op
        """
        key = achievement_id.value if isinstance(achievement_id, AchievementId) else achievement_id
        if not is_known_achievement(key):
            logger.debug(f"Ignoring unlock of unknown achievement {key}")
            return None
        if key in self.progress.achievement_unlocks:
            return None

        loop = asyncio.get_running_loop()
        unlocked_at = self.now()
        self.progress.achievement_unlocks[key] = unlocked_at
        record_achievement_unlock(key)
        logger.info(f"Unlocked achievement: {key}")

        return self._dispatch(
            loop,
            "upsert_achievement_unlock",
            lambda identity: self.store.upsert_achievement_unlock(identity, key, unlocked_at),
        )

    def check_streak(self) -> Optional[asyncio.Task]:
        """
        Count today's visit towards the daily streak.

        Returns:
            Task persisting {'streak', 'last_login_date'}, or None when today
            was already counted
        """
        today = self.today()
        evaluation = evaluate_streak(
            self.progress.streak,
            self.progress.last_login_date,
            today,
            self._zone,
        )
        if not evaluation.changed:
            return None

        loop = asyncio.get_running_loop()
        old_streak = self.progress.streak
        self.progress.streak = evaluation.streak
        self.progress.last_login_date = evaluation.last_login_date
        logger.info(f"Streak updated: {old_streak} → {evaluation.streak} days")

        fields = {"streak": evaluation.streak, "last_login_date": evaluation.last_login_date}
        return self._dispatch(
            loop,
            "write_profile",
            lambda identity: self.store.write_profile(identity, fields),
        )

    def record_quiz_result(
        self,
        topic_id: str,
        subject: str,
        score: int,
        answer_streak: int = 0,
        question_count: int = 0,
    ) -> List[asyncio.Task]:
        """
        Apply everything a finished quiz earns: XP, topic score, achievements.

        Args:
            topic_id: Topic the quiz belongs to
            subject: Subject of the topic ('math', 'science', ...)
            score: Final quiz score, also awarded as XP
            answer_streak: Correct answers in a row at the end of the quiz
            question_count: Number of questions asked

        Returns:
            Write-back tasks for the mutations that took effect
        """
        tasks = [self.add_xp(score)]

        topic_task = self.complete_topic(topic_id, score)
        if topic_task is not None:
            tasks.append(topic_task)

        for achievement_id in achievements_for_quiz(subject, score, answer_streak, question_count):
            unlock_task = self.unlock_achievement(achievement_id)
            if unlock_task is not None:
                tasks.append(unlock_task)

        return tasks

    # ==========================================
    # Write-backs
    # ==========================================

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    async def flush(self) -> List[WriteStatus]:
        """Wait for every in-flight write-back; statuses are in no particular order"""
        if not self._pending:
            return []
        return list(await asyncio.gather(*list(self._pending)))

    def snapshot(self) -> LearnerProgress:
        """Deep copy of the current progress"""
        return self.progress.model_copy(deep=True)

    def _dispatch(
        self,
        loop: asyncio.AbstractEventLoop,
        operation: str,
        write: Callable[[str], Awaitable[None]],
    ) -> asyncio.Task:
        task = loop.create_task(self._persist(operation, write), name=f"learnquest:{operation}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _persist(
        self,
        operation: str,
        write: Callable[[str], Awaitable[None]],
    ) -> WriteStatus:
        identity = None
        try:
            identity = await self.store.get_learner_identity()
            if identity is None:
                logger.debug(f"No authenticated learner; skipping {operation}")
                record_write(operation, WriteStatus.SKIPPED.value)
                return WriteStatus.SKIPPED

            await write(identity)
        except Exception as e:
            self.last_persistence_error = PersistenceError(
                f"{operation} failed: {e}",
                operation=operation,
                learner_id=identity,
                cause=e,
            )
            record_write(operation, WriteStatus.FAILED.value)
            return WriteStatus.FAILED

        record_write(operation, WriteStatus.PERSISTED.value)
        return WriteStatus.PERSISTED
