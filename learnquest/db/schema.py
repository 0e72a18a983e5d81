"""Table definitions for learner progress"""
import logging

from learnquest.db.connection import Database

logger = logging.getLogger(__name__)

PROGRESS_TABLES = ("profiles", "user_progress", "user_achievements")

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        xp INTEGER NOT NULL DEFAULT 0 CHECK (xp >= 0),
        level INTEGER NOT NULL DEFAULT 1 CHECK (level >= 1),
        streak INTEGER NOT NULL DEFAULT 1 CHECK (streak >= 1),
        last_login_date DATE NOT NULL DEFAULT CURRENT_DATE,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_progress (
        id BIGSERIAL PRIMARY KEY,
        user_id TEXT NOT NULL,
        topic_id TEXT NOT NULL,
        score INTEGER NOT NULL CHECK (score >= 0),
        completed_at TIMESTAMPTZ NOT NULL,
        UNIQUE (user_id, topic_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_achievements (
        id BIGSERIAL PRIMARY KEY,
        user_id TEXT NOT NULL,
        achievement_id TEXT NOT NULL,
        unlocked_at TIMESTAMPTZ NOT NULL,
        UNIQUE (user_id, achievement_id)
    )
    """,
)


async def create_schema(database: Database) -> None:
    """Create the progress tables if they do not exist yet"""
    async with database.connection() as conn:
        async with conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                await cur.execute(statement)
        await conn.commit()
    logger.info(f"Progress schema ready: {', '.join(PROGRESS_TABLES)}")
