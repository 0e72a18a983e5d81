"""
Daily Streak System

A streak counts consecutive calendar days with a recorded visit.

Logic:
- Visit on the same day as the last one: no change
- Visit exactly one day later: streak + 1
- Gap of more than one day: reset to 1

Day distance is the rounded-up absolute time between the two local
midnights, not a calendar subtraction. In zones with daylight saving two
consecutive days can be 23 or 25 hours apart; a 25 hour gap counts as
two days and resets the streak. This matches the hosted app and is pinned
by tests.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Union
from zoneinfo import ZoneInfo
import logging
import math

logger = logging.getLogger(__name__)

MS_PER_DAY = 1000 * 60 * 60 * 24


@dataclass(frozen=True)
class StreakEvaluation:
    """Outcome of a daily streak check"""
    streak: int
    last_login_date: date
    changed: bool
    day_difference: int = 0

    @property
    def continued(self) -> bool:
        return self.changed and self.day_difference == 1

    @property
    def reset(self) -> bool:
        return self.changed and self.day_difference > 1


def _as_zone(tz: Optional[Union[str, ZoneInfo]]) -> ZoneInfo:
    if tz is None:
        return ZoneInfo("UTC")
    if isinstance(tz, ZoneInfo):
        return tz
    return ZoneInfo(tz)


def day_difference(
    last: date,
    today: date,
    tz: Optional[Union[str, ZoneInfo]] = None
) -> int:
    """
    Whole days between two calendar dates, rounded up

    Args:
        last: Date of the previous streak evaluation
        today: Current calendar date
        tz: Zone whose midnights are compared (defaults to UTC)

    Returns:
        ceil(|midnight(today) - midnight(last)| in ms / ms per day)
    """
    zone = _as_zone(tz)
    start = datetime.combine(last, time.min, tzinfo=zone)
    end = datetime.combine(today, time.min, tzinfo=zone)

    # Timestamps, not datetime subtraction: same-tzinfo arithmetic ignores offsets
    diff_ms = abs(round((end.timestamp() - start.timestamp()) * 1000))
    return math.ceil(diff_ms / MS_PER_DAY)


def evaluate_streak(
    streak: int,
    last_login_date: date,
    today: date,
    tz: Optional[Union[str, ZoneInfo]] = None
) -> StreakEvaluation:
    """
    Apply the daily visit rules without touching any state

    Args:
        streak: Current streak length
        last_login_date: Date of the last evaluation
        today: Current calendar date
        tz: Zone used for the day distance

    Returns:
        StreakEvaluation with the resulting streak and date
    """
    if last_login_date == today:
        return StreakEvaluation(streak=streak, last_login_date=last_login_date, changed=False)

    days = day_difference(last_login_date, today, tz)

    if days == 1:
        new_streak = streak + 1
    elif days > 1:
        new_streak = 1
        logger.info(f"Streak broken after {streak} days, gap was {days} days")
    else:
        new_streak = streak

    return StreakEvaluation(
        streak=new_streak,
        last_login_date=today,
        changed=True,
        day_difference=days,
    )
