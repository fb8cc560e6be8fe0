"""Services module."""

from .nutrition import NutritionCalculator
from .onboarding import OnboardingWizard
from .dashboard import DashboardSession
from .recognition import FoodRecognitionClient
from .streaks import advance_streak, StreakDateError
from .achievements import check_milestones

__all__ = [
    "NutritionCalculator",
    "OnboardingWizard",
    "DashboardSession",
    "FoodRecognitionClient",
    "advance_streak",
    "StreakDateError",
    "check_milestones",
]
