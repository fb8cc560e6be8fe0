"""Daily log aggregation: per-date nutrition totals from logged meals."""

from datetime import date, datetime, timezone
from typing import Dict, List, Mapping, Optional
from uuid import uuid4

from caloritrack.models.tracking import (
    CalorieSummary,
    DailyLog,
    MacroProgress,
    MealLog,
    MealLogCreate,
    NutritionProgress,
)
from caloritrack.models.user import CalculatedValues

DailyLogs = Dict[date, DailyLog]

# Goals used while the calculator has nothing to offer yet
DEFAULT_CALORIE_GOAL = 2000
DEFAULT_MACRO_GOALS = {"protein": 120, "carbs": 250, "fats": 65}


def _ordered(logs: Mapping[date, DailyLog]) -> DailyLogs:
    return {day: logs[day] for day in sorted(logs)}


def create_daily_log(log_date: date, calculated_values: Optional[CalculatedValues] = None) -> DailyLog:
    """Empty log for a date, seeded with the current calorie and macro goals."""
    values = calculated_values or CalculatedValues()
    calorie_goal = values.daily_calorie_goal or DEFAULT_CALORIE_GOAL
    macros = values.macros

    return DailyLog(
        date=log_date,
        calories=CalorieSummary(consumed=0, goal=calorie_goal, remaining=calorie_goal),
        nutrition=NutritionProgress(
            protein=MacroProgress(goal=macros.protein or DEFAULT_MACRO_GOALS["protein"]),
            carbs=MacroProgress(goal=macros.carbs or DEFAULT_MACRO_GOALS["carbs"]),
            fats=MacroProgress(goal=macros.fats or DEFAULT_MACRO_GOALS["fats"]),
        ),
    )


def get_daily_log(logs: Mapping[date, DailyLog], log_date: date) -> Optional[DailyLog]:
    return logs.get(log_date)


def get_or_create_daily_log(
    logs: Mapping[date, DailyLog],
    log_date: date,
    calculated_values: Optional[CalculatedValues] = None,
) -> DailyLog:
    """Stored log for ``log_date`` or a freshly seeded one (not inserted)."""
    existing = logs.get(log_date)
    if existing is not None:
        return existing
    return create_daily_log(log_date, calculated_values)


def new_meal_log(meal: MealLogCreate, now: Optional[datetime] = None) -> MealLog:
    """Stamp a meal entry with an id, date, time and creation timestamp."""
    now = now or datetime.now(timezone.utc)
    local = now.astimezone()
    return MealLog(
        id=uuid4().hex,
        name=meal.name,
        type=meal.type,
        date=meal.date or local.date(),
        time=meal.time or local.strftime("%H:%M"),
        calories=meal.calories,
        nutrition=meal.nutrition,
        portion=meal.portion,
        photo=meal.photo,
        confidence=meal.confidence,
        method=meal.method,
        raw_response=meal.raw_response,
        created_at=now,
    )


def _with_meal(log: DailyLog, meal: MealLog) -> DailyLog:
    consumed = log.calories.consumed + meal.calories
    goal = log.calories.goal
    nutrition = log.nutrition
    meals = [*log.meals, meal]

    return log.model_copy(update={
        "calories": CalorieSummary(consumed=consumed, goal=goal, remaining=max(0, goal - consumed)),
        "nutrition": NutritionProgress(
            protein=MacroProgress(current=nutrition.protein.current + meal.nutrition.protein, goal=nutrition.protein.goal),
            carbs=MacroProgress(current=nutrition.carbs.current + meal.nutrition.carbs, goal=nutrition.carbs.goal),
            fats=MacroProgress(current=nutrition.fats.current + meal.nutrition.fats, goal=nutrition.fats.goal),
        ),
        "meals": meals,
        "completed": len(meals) > 0,
    })


def add_meal(
    logs: Mapping[date, DailyLog],
    meal: MealLog,
    calculated_values: Optional[CalculatedValues] = None,
) -> DailyLogs:
    """
    Append a meal to the log for ``meal.date`` and recompute totals.

    The log is created on first use, seeded from ``calculated_values``.
    Returns a new date-ordered mapping; ``logs`` is left untouched.
    Meals are never removed or edited here.
    """
    log = get_or_create_daily_log(logs, meal.date, calculated_values)
    updated = dict(logs)
    updated[meal.date] = _with_meal(log, meal)
    return _ordered(updated)


def log_water(
    logs: Mapping[date, DailyLog],
    log_date: date,
    glasses: int = 1,
    calculated_values: Optional[CalculatedValues] = None,
    at: Optional[datetime] = None,
) -> DailyLogs:
    log = get_or_create_daily_log(logs, log_date, calculated_values)
    water = log.water.model_copy(update={
        "glasses": max(0, log.water.glasses + glasses),
        "last_glass_time": at or datetime.now(timezone.utc),
    })
    updated = dict(logs)
    updated[log_date] = log.model_copy(update={"water": water})
    return _ordered(updated)


def update_steps(
    logs: Mapping[date, DailyLog],
    log_date: date,
    count: int,
    calculated_values: Optional[CalculatedValues] = None,
) -> DailyLogs:
    log = get_or_create_daily_log(logs, log_date, calculated_values)
    updated = dict(logs)
    updated[log_date] = log.model_copy(update={"steps": log.steps.model_copy(update={"count": max(0, count)})})
    return _ordered(updated)


def recent_meals(logs: Mapping[date, DailyLog], limit: int = 20) -> List[MealLog]:
    """Meals from the most recent dates first, in logged order within a day."""
    meals: List[MealLog] = []
    for day in sorted(logs, reverse=True):
        meals.extend(logs[day].meals)
        if len(meals) >= limit:
            break
    return meals[:limit]
