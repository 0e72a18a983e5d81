"""
LearnerSession - per-session wiring of store and progression engine

Each signed-in (or anonymous) learner gets its own session object; nothing
about a learner's progress lives in module globals.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import logging

from learnquest.db.connection import Database
from learnquest.db.store import InMemoryProgressStore, PostgresProgressStore, ProgressStore
from learnquest.services.progress_service import ProgressionEngine, WriteStatus

logger = logging.getLogger(__name__)


@dataclass
class LearnerSession:
    """
    Owns the progression engine of one learner session.

    The engine is created lazily on first access. Without a database the
    session keeps progress in an InMemoryProgressStore (demo mode).
    """

    learner_id: Optional[str] = None
    database: Optional[Database] = None
    streak_timezone: Optional[str] = None

    _store: Optional[ProgressStore] = field(default=None, init=False, repr=False)
    _engine: Optional[ProgressionEngine] = field(default=None, init=False, repr=False)

    @property
    def store(self) -> ProgressStore:
        """Get the session's ProgressStore (lazy-loaded)"""
        if self._store is None:
            if self.database is not None:
                self._store = PostgresProgressStore(self.database, self.learner_id)
            else:
                self._store = InMemoryProgressStore(self.learner_id)
            logger.debug(f"{type(self._store).__name__} instantiated")
        return self._store

    @property
    def engine(self) -> ProgressionEngine:
        """Get the session's ProgressionEngine (lazy-loaded)"""
        if self._engine is None:
            self._engine = ProgressionEngine(self.store, streak_timezone=self.streak_timezone)
            logger.debug("ProgressionEngine instantiated")
        return self._engine

    async def begin(self) -> bool:
        """
        Start the session: hydrate progress, then count today's visit.

        Returns:
            Whether stored progress was loaded
        """
        loaded = await self.engine.fetch_progress()
        self.engine.check_streak()
        return loaded

    async def end(self) -> List[WriteStatus]:
        """Wait for outstanding write-backs before the session is dropped"""
        statuses = await self.engine.flush()
        failed = sum(1 for status in statuses if status == WriteStatus.FAILED)
        if failed:
            logger.warning(f"Session for learner {self.learner_id} ended with {failed} failed writes")
        return statuses
