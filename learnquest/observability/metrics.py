"""
Prometheus metrics definitions for learnquest.

Metrics are grouped by concern:
- Progress synchronization: write-backs and hydrations against the store
- Gamification: achievement unlocks and level-ups

The host application exposes them with prometheus_client's exporter of its
choice; nothing here starts an HTTP server.
"""

import logging
from prometheus_client import Counter

logger = logging.getLogger(__name__)

# =============================================================================
# Progress Synchronization Metrics
# =============================================================================

progress_writes_total = Counter(
    "learnquest_progress_writes_total",
    "Progress write-backs by store operation and outcome",
    ["operation", "status"],  # status: persisted/skipped/failed
)

progress_hydrations_total = Counter(
    "learnquest_progress_hydrations_total",
    "Progress snapshot loads by outcome",
    ["status"],  # status: loaded/anonymous/failed
)

# =============================================================================
# Gamification Metrics
# =============================================================================

achievements_unlocked_total = Counter(
    "learnquest_achievements_unlocked_total",
    "Achievement unlocks applied in memory",
    ["achievement_id"],
)

level_ups_total = Counter(
    "learnquest_level_ups_total",
    "XP awards that moved a learner to a higher level",
)


def record_write(operation: str, status: str) -> None:
    """Count a finished write-back; metric errors never reach the engine"""
    try:
        progress_writes_total.labels(operation=operation, status=status).inc()
    except Exception as e:
        logger.warning(f"Failed to record write metric: {e}")


def record_hydration(status: str) -> None:
    try:
        progress_hydrations_total.labels(status=status).inc()
    except Exception as e:
        logger.warning(f"Failed to record hydration metric: {e}")


def record_achievement_unlock(achievement_id: str) -> None:
    try:
        achievements_unlocked_total.labels(achievement_id=achievement_id).inc()
    except Exception as e:
        logger.warning(f"Failed to record achievement metric: {e}")


def record_level_up(levels: int = 1) -> None:
    try:
        level_ups_total.inc(levels)
    except Exception as e:
        logger.warning(f"Failed to record level-up metric: {e}")
