"""
Database queries - re-exported so callers can use
'from learnquest.db import queries' and 'queries.get_profile(...)'.

Module organization:
- progress.py: profiles, completed topics, achievement unlocks, table checks
"""

from learnquest.db.queries.progress import (
    PROFILE_COLUMNS,
    get_profile,
    update_profile,
    get_completed_topics,
    upsert_completed_topic,
    get_unlocked_achievements,
    upsert_achievement_unlock,
    check_database_connection,
)

__all__ = [
    "PROFILE_COLUMNS",
    "get_profile",
    "update_profile",
    "get_completed_topics",
    "upsert_completed_topic",
    "get_unlocked_achievements",
    "upsert_achievement_unlock",
    "check_database_connection",
]
