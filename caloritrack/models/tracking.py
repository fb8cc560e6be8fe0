"""Tracking models for daily logs, meals, streaks and achievements."""

from pydantic import BaseModel, Field
from typing import Optional, List, Literal
import datetime as dt


MealType = Literal["breakfast", "lunch", "dinner", "snack"]
EntryMethod = Literal["camera", "manual", "barcode", "quickadd"]
AchievementCategory = Literal["streak", "nutrition", "weight", "activity", "milestone"]
Rarity = Literal["common", "rare", "epic", "legendary"]

STREAK_HISTORY_LIMIT = 30


class MacroGrams(BaseModel):
    """Macro content of a single meal, in grams."""

    protein: float = Field(0, ge=0)
    carbs: float = Field(0, ge=0)
    fats: float = Field(0, ge=0)


class Portion(BaseModel):
    amount: float = 1
    unit: str = "serving"


class MealLogCreate(BaseModel):
    """Data for logging a meal."""

    name: str
    type: MealType = "snack"
    date: Optional[dt.date] = None  # defaults to today
    time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")  # HH:MM
    calories: float = Field(0, ge=0)
    nutrition: MacroGrams = Field(default_factory=MacroGrams)
    portion: Portion = Field(default_factory=Portion)
    photo: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0, le=1)
    method: EntryMethod = "manual"
    raw_response: Optional[str] = None


class MealLog(BaseModel):
    """Logged meal. Immutable once created."""

    id: str
    name: str
    type: MealType
    date: dt.date
    time: str
    calories: float
    nutrition: MacroGrams
    portion: Portion
    photo: Optional[str] = None
    confidence: Optional[float] = None
    method: EntryMethod
    raw_response: Optional[str] = None
    created_at: dt.datetime

    class Config:
        frozen = True


class CalorieSummary(BaseModel):
    consumed: float = 0
    goal: int = 0
    remaining: float = 0


class MacroProgress(BaseModel):
    current: float = 0
    goal: int = 0


class NutritionProgress(BaseModel):
    protein: MacroProgress = Field(default_factory=MacroProgress)
    carbs: MacroProgress = Field(default_factory=MacroProgress)
    fats: MacroProgress = Field(default_factory=MacroProgress)


class WaterIntake(BaseModel):
    glasses: int = 0
    goal: int = 8
    last_glass_time: Optional[dt.datetime] = None


class StepCount(BaseModel):
    count: int = 0
    goal: int = 10000


class DailyLog(BaseModel):
    """Aggregated nutrition record for one calendar date."""

    date: dt.date
    calories: CalorieSummary = Field(default_factory=CalorieSummary)
    nutrition: NutritionProgress = Field(default_factory=NutritionProgress)
    water: WaterIntake = Field(default_factory=WaterIntake)
    steps: StepCount = Field(default_factory=StepCount)
    meals: List[MealLog] = []
    notes: Optional[str] = None
    completed: bool = False


class StreakDay(BaseModel):
    """Snapshot of one active day in the streak history."""

    date: dt.date
    completed: bool = True
    meals_logged: int = 0
    calories_goal: int = 0
    calories_consumed: float = 0
    water_intake: int = 0


class StreakData(BaseModel):
    """Consecutive active day tracking."""

    current_streak: int = Field(0, ge=0)
    best_streak: int = Field(0, ge=0)
    week_days: List[bool] = Field(
        default_factory=lambda: [False] * 7, min_length=7, max_length=7
    )  # Monday first
    last_active_date: Optional[dt.date] = None
    streak_history: List[StreakDay] = Field([], max_length=STREAK_HISTORY_LIMIT)


class Achievement(BaseModel):
    """Unlocked milestone. Ids are unique within a user's set."""

    id: str
    title: str
    description: str
    icon: str
    unlocked_at: dt.datetime
    category: AchievementCategory
    rarity: Rarity


class Notification(BaseModel):
    """In-app notification stored on the user document."""

    id: str
    type: Literal["achievement", "reminder", "milestone", "tip", "warning"]
    title: str
    message: str
    read: bool = False
    created_at: dt.datetime
    priority: Literal["low", "medium", "high"] = "medium"


class UserProgress(BaseModel):
    """Weight progress tracked after onboarding."""

    current_weight: float = 0
    starting_weight: float = 0
    goal_weight: float = 0
    weight_loss_total: float = 0
    weight_loss_to_goal: float = 0
    weekly_weight_change: float = 0
    average_weekly_loss: float = 0
    time_on_app: int = 0  # days since onboarding completed
    last_weight_update: Optional[dt.date] = None
