"""Learner progress database queries"""
import logging
from datetime import datetime
from typing import Any, Optional

from psycopg import sql

from learnquest.db.connection import Database, db
from learnquest.db.schema import PROGRESS_TABLES

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = ("xp", "level", "streak", "last_login_date")


# ==========================================
# Profile Functions
# ==========================================

async def get_profile(user_id: str, database: Optional[Database] = None) -> Optional[dict]:
    """
    Get the progress columns of a learner profile

    Returns:
        {'xp': int, 'level': int, 'streak': int, 'last_login_date': date}
        or None when the learner has no profile row
    """
    async with (database or db).connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT xp, level, streak, last_login_date
                FROM profiles
                WHERE id = %s
                """,
                (user_id,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


async def update_profile(
    user_id: str,
    fields: dict[str, Any],
    database: Optional[Database] = None
) -> None:
    """
    Write a subset of the progress columns, creating the row if needed

    Args:
        user_id: Learner ID
        fields: Any of xp, level, streak, last_login_date
    """
    unknown = set(fields) - set(PROFILE_COLUMNS)
    if unknown:
        raise ValueError(f"Not a profile progress column: {', '.join(sorted(unknown))}")
    if not fields:
        return

    columns = [column for column in PROFILE_COLUMNS if column in fields]
    query = sql.SQL(
        """
        INSERT INTO profiles (id, {columns})
        VALUES (%s, {placeholders})
        ON CONFLICT (id) DO UPDATE
        SET {assignments}, updated_at = CURRENT_TIMESTAMP
        """
    ).format(
        columns=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
        placeholders=sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        assignments=sql.SQL(", ").join(
            sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(c)) for c in columns
        ),
    )

    async with (database or db).connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, (user_id, *(fields[c] for c in columns)))
            await conn.commit()


# ==========================================
# Completed Topic Functions
# ==========================================

async def get_completed_topics(user_id: str, database: Optional[Database] = None) -> list[dict]:
    """
    Get best-score records for all topics the learner finished

    Returns:
        List of {'topic_id', 'score', 'completed_at'} ordered by completion time
    """
    async with (database or db).connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT topic_id, score, completed_at
                FROM user_progress
                WHERE user_id = %s
                ORDER BY completed_at
                """,
                (user_id,)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def upsert_completed_topic(
    user_id: str,
    topic_id: str,
    score: int,
    completed_at: datetime,
    database: Optional[Database] = None
) -> None:
    """
    Store a topic result; an existing row only changes for a higher score
    """
    async with (database or db).connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO user_progress (user_id, topic_id, score, completed_at)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (user_id, topic_id) DO UPDATE
                SET score = EXCLUDED.score,
                    completed_at = EXCLUDED.completed_at
                WHERE user_progress.score < EXCLUDED.score
                """,
                (user_id, topic_id, score, completed_at)
            )
            await conn.commit()


# ==========================================
# Achievement Functions
# ==========================================

async def get_unlocked_achievements(user_id: str, database: Optional[Database] = None) -> list[dict]:
    """
    Get achievement unlocks for a learner

    Returns:
        List of {'achievement_id', 'unlocked_at'}
    """
    async with (database or db).connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT achievement_id, unlocked_at
                FROM user_achievements
                WHERE user_id = %s
                ORDER BY unlocked_at
                """,
                (user_id,)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def upsert_achievement_unlock(
    user_id: str,
    achievement_id: str,
    unlocked_at: datetime,
    database: Optional[Database] = None
) -> None:
    """
    Record an unlock; the first stored unlock time is kept
    """
    async with (database or db).connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO user_achievements (user_id, achievement_id, unlocked_at)
                VALUES (%s, %s, %s)
                ON CONFLICT (user_id, achievement_id) DO NOTHING
                """,
                (user_id, achievement_id, unlocked_at)
            )
            await conn.commit()


# ==========================================
# Health Check
# ==========================================

async def check_database_connection(database: Optional[Database] = None) -> list[str]:
    """
    Report whether each progress table can be read

    Returns:
        One line per table, e.g. '✅ profiles: Ready' or '❌ user_progress: <error>'
    """
    results = []

    for table in PROGRESS_TABLES:
        try:
            async with (database or db).connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        sql.SQL("SELECT 1 FROM {} LIMIT 1").format(sql.Identifier(table))
                    )
            results.append(f"✅ {table}: Ready")
        except Exception as e:
            logger.warning(f"Table check failed for {table}: {e}")
            results.append(f"❌ {table}: {e}")

    return results
