"""Consecutive active day tracking."""

from datetime import date
from typing import Optional

from caloritrack.models.tracking import (
    STREAK_HISTORY_LIMIT,
    DailyLog,
    StreakData,
    StreakDay,
)


class StreakDateError(ValueError):
    """Activity date is earlier than the last recorded active date."""

    def __init__(self, activity_date: date, last_active_date: date):
        self.activity_date = activity_date
        self.last_active_date = last_active_date
        super().__init__(
            f"Activity on {activity_date.isoformat()} precedes last active date "
            f"{last_active_date.isoformat()}"
        )


def week_day_slot(day: date) -> int:
    """Monday-first slot (0=Mon ... 6=Sun)."""
    return day.weekday()


def _streak_day(activity_date: date, daily_log: Optional[DailyLog]) -> StreakDay:
    if daily_log is None:
        return StreakDay(date=activity_date, completed=True)
    return StreakDay(
        date=activity_date,
        completed=True,
        meals_logged=len(daily_log.meals),
        calories_goal=daily_log.calories.goal,
        calories_consumed=daily_log.calories.consumed,
        water_intake=daily_log.water.glasses,
    )


def advance_streak(
    streak: StreakData,
    activity_date: date,
    daily_log: Optional[DailyLog] = None,
) -> StreakData:
    """
    Record activity on ``activity_date`` and return the updated streak.

    Same day: streak unchanged. Next day: +1. Any gap: restart at 1.
    Activity dates must be non-decreasing; an earlier date raises
    ``StreakDateError``. The history entry for the day is snapshotted from
    ``daily_log`` when given and the history keeps the last 30 days.
    """
    last_date = streak.last_active_date
    current = streak.current_streak

    if last_date is None:
        current = 1
    else:
        diff_days = (activity_date - last_date).days
        if diff_days < 0:
            raise StreakDateError(activity_date, last_date)
        if diff_days == 1:
            current += 1
        elif diff_days > 1:
            current = 1
        # diff_days == 0: already counted today

    week_days = list(streak.week_days)
    week_days[week_day_slot(activity_date)] = True

    entry = _streak_day(activity_date, daily_log)
    history = list(streak.streak_history)
    for index, day in enumerate(history):
        if day.date == activity_date:
            history[index] = entry
            break
    else:
        history.append(entry)
    history = history[-STREAK_HISTORY_LIMIT:]

    return StreakData(
        current_streak=current,
        best_streak=max(streak.best_streak, current),
        week_days=week_days,
        last_active_date=activity_date,
        streak_history=history,
    )
