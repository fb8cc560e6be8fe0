"""Onboarding wizard state and screen configuration."""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime

from .user import (
    Account,
    Activity,
    CalculatedValues,
    Commitment,
    Diet,
    Goals,
    HeightUnit,
    Preferences,
    Profile,
    WeightUnit,
)


DRAFT_VERSION = "1.0.0"

ONBOARDING_SCREENS = (
    "welcome",
    "name",
    "last-name",
    "gender",
    "date-of-birth",
    "height",
    "weight",
    "profile-photo",
    "profile",
    "goals-primary",
    "goals-motivation",
    "goals-weight",
    "goals-timeline",
    "goals-weekly",
    "activity",
    "occupation",
    "exercise-types",
    "exercise-frequency",
    "sleep-hours",
    "diet",
    "allergies",
    "intolerances",
    "disliked-foods",
    "cultural-restrictions",
    "notifications",
    "privacy",
    "camera-tutorial",
    "commitment",
    "account-creation",
    "summary",
)

SCREEN_STEPS: Dict[str, int] = {screen: index for index, screen in enumerate(ONBOARDING_SCREENS)}

TOTAL_STEPS = len(ONBOARDING_SCREENS)

SECTION_MODELS = {
    "profile": Profile,
    "goals": Goals,
    "activity": Activity,
    "diet": Diet,
    "preferences": Preferences,
    "commitment": Commitment,
    "account": Account,
}

# Sections that feed the metabolic calculator
CALCULATION_SECTIONS = ("profile", "goals", "activity")


class OnboardingState(BaseModel):
    """Snapshot of the wizard. Replaced whole on every action."""

    profile: Profile = Field(default_factory=Profile)
    goals: Goals = Field(default_factory=Goals)
    activity: Activity = Field(default_factory=Activity)
    diet: Diet = Field(default_factory=Diet)
    preferences: Preferences = Field(default_factory=Preferences)
    commitment: Commitment = Field(default_factory=Commitment)
    account: Account = Field(default_factory=Account)

    current_step: int = Field(0, ge=0, le=TOTAL_STEPS - 1)
    completed_steps: List[int] = []
    is_completed: bool = False

    height_unit: HeightUnit = "cm"
    weight_unit: WeightUnit = "kg"

    calculated_values: CalculatedValues = Field(default_factory=CalculatedValues)

    @property
    def total_steps(self) -> int:
        return TOTAL_STEPS

    @property
    def current_screen(self) -> str:
        return ONBOARDING_SCREENS[self.current_step]


class OnboardingDraft(BaseModel):
    """Serialized wizard blob kept in the local draft store."""

    profile: Profile = Field(default_factory=Profile)
    goals: Goals = Field(default_factory=Goals)
    activity: Activity = Field(default_factory=Activity)
    diet: Diet = Field(default_factory=Diet)
    preferences: Preferences = Field(default_factory=Preferences)
    commitment: Commitment = Field(default_factory=Commitment)
    account: Account = Field(default_factory=Account)
    current_step: int = 0
    completed_steps: List[int] = []
    is_completed: bool = False
    last_updated: Optional[datetime] = None
    version: str = DRAFT_VERSION
    height_unit: HeightUnit = "cm"
    weight_unit: WeightUnit = "kg"
