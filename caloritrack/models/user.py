"""User profile models collected by the onboarding wizard."""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Literal, Dict, Any
from datetime import date, datetime

from .tracking import (
    Achievement,
    DailyLog,
    Notification,
    StreakData,
    UserProgress,
)


Gender = Literal["male", "female", "other"]
PrimaryGoal = Literal["weight_loss", "maintenance", "muscle_gain", "healthy_eating"]
ActivityLevel = Literal[
    "sedentary", "lightly_active", "moderately_active", "very_active", "extremely_active"
]
Occupation = Literal["office", "physical", "mixed"]
HeightUnit = Literal["cm", "inches"]
WeightUnit = Literal["kg", "lbs"]


def derive_age(date_of_birth: date, today: Optional[date] = None) -> int:
    """Whole years between a birth date and today."""
    today = today or date.today()
    had_birthday = (today.month, today.day) >= (date_of_birth.month, date_of_birth.day)
    return today.year - date_of_birth.year - (0 if had_birthday else 1)


class Profile(BaseModel):
    """Identity and body metrics. Every field is optional while onboarding."""

    name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    age: Optional[int] = Field(None, ge=0, le=130)
    gender: Optional[Gender] = None
    height: Optional[float] = Field(None, gt=0)  # cm
    current_weight: Optional[float] = Field(None, gt=0)  # kg
    profile_photo: Optional[str] = None

    @model_validator(mode="after")
    def _derive_age(self) -> "Profile":
        if self.date_of_birth is not None:
            self.age = derive_age(self.date_of_birth)
        return self


class Goals(BaseModel):
    """Weight goal and motivation."""

    primary_goal: Optional[PrimaryGoal] = None
    target_weight: Optional[float] = Field(None, gt=0)
    timeline: Optional[int] = Field(None, ge=0)  # weeks
    weekly_goal: Optional[float] = None  # kg per week, signed
    motivation: Optional[int] = Field(None, ge=1, le=10)


class Activity(BaseModel):
    """Activity level and habits."""

    level: Optional[ActivityLevel] = None
    occupation: Optional[Occupation] = None
    exercise_types: List[str] = []
    exercise_frequency: Optional[int] = Field(None, ge=0, le=7)
    sleep_hours: Optional[float] = Field(None, ge=0, le=24)


class Diet(BaseModel):
    """Diet type and free-text food restrictions."""

    type: Optional[str] = None
    allergies: List[str] = []
    intolerances: List[str] = []
    disliked_foods: List[str] = []
    cultural_restrictions: List[str] = []


class NotificationPreferences(BaseModel):
    meal_reminders: bool = True
    water_reminders: bool = True
    exercise_reminders: bool = True
    daily_summary: bool = True
    achievements: bool = True


class PrivacyPreferences(BaseModel):
    data_sharing: bool = False
    analytics: bool = True
    marketing: bool = False


class Preferences(BaseModel):
    """Notification and privacy toggles."""

    notifications: Optional[NotificationPreferences] = None
    privacy: Optional[PrivacyPreferences] = None


class Commitment(BaseModel):
    """Signed commitment statement from the commitment screen."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    commitment_statement: Optional[str] = None
    timestamp: Optional[datetime] = None


class AccountAgreements(BaseModel):
    agree_to_terms: bool = False
    agree_to_privacy: bool = False
    subscribe_to_newsletter: bool = False


class Account(BaseModel):
    """Account details captured before the summary screen."""

    username: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    preferences: Optional[AccountAgreements] = None


class Macros(BaseModel):
    protein: int = 0
    carbs: int = 0
    fats: int = 0


class CalculatedValues(BaseModel):
    """Derived energy budget. A cache over profile, activity and goals."""

    bmr: int = 0
    tdee: int = 0
    daily_calorie_goal: int = 0
    macros: Macros = Field(default_factory=Macros)

    @property
    def is_computable(self) -> bool:
        return self.bmr > 0


class UserMetadata(BaseModel):
    """App usage metadata stored on the user document."""

    last_login_at: Optional[datetime] = None
    app_version: str = "1.0.0"
    timezone: str = "UTC"
    locale: str = "en-US"


class UserDocument(BaseModel):
    """Remote per-user document: committed sections plus tracking data."""

    user_id: str
    onboarding_completed: bool = False
    onboarding_completed_at: Optional[datetime] = None

    profile: Profile = Field(default_factory=Profile)
    goals: Goals = Field(default_factory=Goals)
    activity: Activity = Field(default_factory=Activity)
    diet: Diet = Field(default_factory=Diet)
    preferences: Preferences = Field(default_factory=Preferences)
    commitment: Optional[Commitment] = None
    account: Optional[Account] = None
    calculated_values: CalculatedValues = Field(default_factory=CalculatedValues)

    progress: Optional[UserProgress] = None
    streaks: Optional[StreakData] = None
    daily_logs: Optional[Dict[date, DailyLog]] = None
    achievements: List[Achievement] = []
    notifications: List[Notification] = []
    analytics: Dict[str, Any] = {}
    metadata: Optional[UserMetadata] = None

    class Config:
        from_attributes = True
