"""Data models for CaloriTrack."""

from .user import (
    Profile,
    Goals,
    Activity,
    Diet,
    Preferences,
    Commitment,
    Account,
    CalculatedValues,
    Macros,
    UserDocument,
    UserMetadata,
)
from .tracking import (
    MealLog,
    MealLogCreate,
    MacroGrams,
    DailyLog,
    StreakData,
    StreakDay,
    Achievement,
    Notification,
    UserProgress,
)
from .onboarding import OnboardingState, OnboardingDraft, ONBOARDING_SCREENS, TOTAL_STEPS

__all__ = [
    "Profile",
    "Goals",
    "Activity",
    "Diet",
    "Preferences",
    "Commitment",
    "Account",
    "CalculatedValues",
    "Macros",
    "UserDocument",
    "UserMetadata",
    "MealLog",
    "MealLogCreate",
    "MacroGrams",
    "DailyLog",
    "StreakData",
    "StreakDay",
    "Achievement",
    "Notification",
    "UserProgress",
    "OnboardingState",
    "OnboardingDraft",
    "ONBOARDING_SCREENS",
    "TOTAL_STEPS",
]
