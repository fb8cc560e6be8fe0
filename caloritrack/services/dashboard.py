"""Per-user dashboard session: meal logging, streaks and achievements."""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from loguru import logger

from caloritrack.config import get_settings
from caloritrack.db.supabase import RemoteDocumentStore
from caloritrack.db.writes import BackgroundWrites
from caloritrack.models.tracking import (
    Achievement,
    DailyLog,
    MealLog,
    MealLogCreate,
    Notification,
    StreakData,
    UserProgress,
)
from caloritrack.models.user import Activity, Goals, Profile, UserDocument, UserMetadata
from caloritrack.services import daily_log
from caloritrack.services.achievements import check_milestones, merge_achievements
from caloritrack.services.nutrition import NutritionCalculator
from caloritrack.services.onboarding import UnknownSectionError
from caloritrack.services.streaks import StreakDateError, advance_streak


def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def week_end(day: date) -> date:
    return week_start(day) + timedelta(days=6)


def initial_analytics(today: date) -> Dict[str, Any]:
    return {
        "weekly_stats": {
            "week_start": week_start(today).isoformat(),
            "week_end": week_end(today).isoformat(),
            "total_calories": 0,
            "average_calories": 0,
            "goal_achievement_days": 0,
            "streak_maintained": False,
        },
        "monthly_stats": {
            "month": today.strftime("%Y-%m"),
            "active_days": 0,
            "total_calories": 0,
            "achievements_unlocked": 0,
        },
        "yearly_stats": {
            "year": today.year,
            "active_days": 0,
            "longest_streak": 0,
        },
        "progress_trends": [],
        "insights": [],
    }


def initialize_dashboard_data(document: UserDocument, now: Optional[datetime] = None) -> UserDocument:
    """Fill in the tracking fields a freshly onboarded document lacks."""
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    today = now.astimezone().date()
    weight = document.profile.current_weight or 0

    return document.model_copy(update={
        "progress": document.progress or UserProgress(
            current_weight=weight,
            starting_weight=weight,
            goal_weight=document.goals.target_weight or weight,
            last_weight_update=today,
        ),
        "streaks": StreakData(),
        "daily_logs": {},
        "achievements": [],
        "notifications": [],
        "analytics": initial_analytics(today),
        "metadata": UserMetadata(
            last_login_at=now,
            app_version=settings.app_version,
            timezone=settings.timezone,
            locale=settings.locale,
        ),
    })


# Committed sections that can be edited after onboarding
EDITABLE_SECTIONS = {"profile": Profile, "goals": Goals, "activity": Activity}


def achievement_notification(achievement: Achievement) -> Notification:
    return Notification(
        id=uuid4().hex,
        type="achievement",
        title=achievement.title,
        message=achievement.description,
        created_at=achievement.unlocked_at,
        priority="high" if achievement.rarity != "common" else "medium",
    )


class DashboardSession:
    """
    In-memory owner of one user's document.

    Mutations replace ``self.document`` whole and schedule a merge write to
    the remote store. The in-memory document stays authoritative for the
    session whatever the write outcome.
    """

    def __init__(
        self,
        user_id: str,
        remote_store: Optional[RemoteDocumentStore] = None,
        writes: Optional[BackgroundWrites] = None,
    ):
        self.user_id = user_id
        self.remote_store = remote_store
        self.writes = writes or BackgroundWrites()
        self.document = initialize_dashboard_data(UserDocument(user_id=user_id))

    def _commit(self, fields: Dict[str, Any]) -> None:
        if self.remote_store is None:
            return
        self.writes.schedule(self.remote_store.merge_document(self.user_id, fields))

    async def load(self) -> UserDocument:
        """Read the remote document. Read failures start a fresh session."""
        if self.remote_store is None:
            return self.document

        result = await self.remote_store.get_document(self.user_id)
        if not result.ok:
            logger.warning(f"Starting fresh dashboard for {self.user_id} after read failure")
            self.document = initialize_dashboard_data(UserDocument(user_id=self.user_id))
            return self.document

        document = result.value or UserDocument(user_id=self.user_id)
        if document.streaks is None or document.daily_logs is None:
            document = initialize_dashboard_data(document)
            self.document = document
            self._commit({
                key: getattr(document, key)
                for key in ("progress", "streaks", "daily_logs", "achievements", "notifications", "analytics", "metadata")
            })
            logger.info(f"Dashboard data initialized for {self.user_id}")
            return self.document

        metadata = (document.metadata or UserMetadata()).model_copy(
            update={"last_login_at": datetime.now(timezone.utc)}
        )
        self.document = document.model_copy(update={"metadata": metadata})
        self._commit({"metadata": metadata})
        return self.document

    @property
    def daily_logs(self) -> Dict[date, DailyLog]:
        return self.document.daily_logs or {}

    @property
    def streaks(self) -> StreakData:
        return self.document.streaks or StreakData()

    def get_daily_log(self, log_date: Optional[date] = None) -> DailyLog:
        """Log for a date, seeded from the current goals if nothing was logged yet."""
        return daily_log.get_or_create_daily_log(
            self.daily_logs, log_date or date.today(), self.document.calculated_values
        )

    def today_log(self) -> DailyLog:
        return self.get_daily_log(date.today())

    def recent_meals(self, limit: int = 20) -> List[MealLog]:
        return daily_log.recent_meals(self.daily_logs, limit)

    def update_section(self, section: str, partial: Dict[str, Any]) -> UserDocument:
        """
        Edit a committed profile, goals or activity section.

        The partial is merged over the stored section and the energy budget
        is recomputed. Logs created from now on use the new goals; existing
        logs keep theirs.
        """
        model = EDITABLE_SECTIONS.get(section)
        if model is None:
            raise UnknownSectionError(section)

        document = self.document
        current = getattr(document, section)
        merged = model.model_validate({**current.model_dump(exclude_none=True), **partial})
        document = document.model_copy(update={section: merged})

        values = NutritionCalculator.compute_calculated_values(document.profile, document.activity, document.goals)
        fields: Dict[str, Any] = {section: merged, "calculated_values": values}

        progress = document.progress
        if progress is not None:
            if section == "profile" and merged.current_weight and merged.current_weight != progress.current_weight:
                progress = progress.model_copy(update={
                    "current_weight": merged.current_weight,
                    "last_weight_update": date.today(),
                })
            if section == "goals" and merged.target_weight:
                progress = progress.model_copy(update={"goal_weight": merged.target_weight})
            if progress is not document.progress:
                fields["progress"] = progress

        self.document = document.model_copy(update=fields)
        self._commit(fields)
        logger.info(f"Updated {section} for {self.user_id}, daily goal now {values.daily_calorie_goal} kcal")
        return self.document

    def add_meal(self, meal_data: MealLogCreate) -> MealLog:
        """
        Log a meal: update that day's totals, advance the streak, unlock
        milestone achievements and commit the changed fields.
        """
        meal = daily_log.new_meal_log(meal_data)
        document = self.document
        logs = daily_log.add_meal(self.daily_logs, meal, document.calculated_values)

        streaks = self.streaks
        try:
            streaks = advance_streak(streaks, meal.date, logs[meal.date])
        except StreakDateError as e:
            logger.warning(f"Streak left unchanged for back-dated meal: {e}")

        unlocked = check_milestones(streaks.current_streak, document.achievements)
        notifications = list(document.notifications)
        notify = document.preferences.notifications is None or document.preferences.notifications.achievements
        if notify:
            notifications.extend(achievement_notification(a) for a in unlocked)

        self.document = document.model_copy(update={
            "daily_logs": logs,
            "streaks": streaks,
            "achievements": merge_achievements(document.achievements, unlocked),
            "notifications": notifications,
        })

        self._commit({"daily_logs": logs, "streaks": streaks, "notifications": notifications})
        if unlocked and self.remote_store is not None:
            self.writes.schedule(self.remote_store.add_achievements(self.user_id, unlocked))

        logger.info(f"Meal logged for {self.user_id}: {meal.name} ({meal.calories} kcal) on {meal.date}")
        return meal

    def log_water(self, glasses: int = 1, log_date: Optional[date] = None) -> DailyLog:
        log_date = log_date or date.today()
        logs = daily_log.log_water(self.daily_logs, log_date, glasses, self.document.calculated_values)
        self.document = self.document.model_copy(update={"daily_logs": logs})
        self._commit({"daily_logs": logs})
        return logs[log_date]

    def update_steps(self, count: int, log_date: Optional[date] = None) -> DailyLog:
        log_date = log_date or date.today()
        logs = daily_log.update_steps(self.daily_logs, log_date, count, self.document.calculated_values)
        self.document = self.document.model_copy(update={"daily_logs": logs})
        self._commit({"daily_logs": logs})
        return logs[log_date]

    async def flush(self) -> None:
        await self.writes.flush()
