"""Onboarding wizard: pure state transitions and a persisting store."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import ValidationError

from caloritrack.db.local import LocalDraftStore
from caloritrack.db.result import GatewayResult
from caloritrack.db.supabase import RemoteDocumentStore
from caloritrack.db.writes import BackgroundWrites
from caloritrack.models.onboarding import (
    CALCULATION_SECTIONS,
    DRAFT_VERSION,
    ONBOARDING_SCREENS,
    SCREEN_STEPS,
    SECTION_MODELS,
    TOTAL_STEPS,
    OnboardingDraft,
    OnboardingState,
)
from caloritrack.models.user import (
    Goals,
    Activity,
    Diet,
    Preferences,
    NotificationPreferences,
    PrivacyPreferences,
    AccountAgreements,
    Profile,
)
from caloritrack.services.nutrition import NutritionCalculator, inches_to_cm, lbs_to_kg


class UnknownSectionError(KeyError):
    """Raised for a section name the wizard does not hold."""


# Screen lookup helpers

def get_step_for_screen(screen_name: str) -> int:
    """Step index of a screen; unknown screens map to 0."""
    return SCREEN_STEPS.get(screen_name, 0)


def is_valid_screen(screen_name: str) -> bool:
    return screen_name in SCREEN_STEPS


def progress_percentage(step: int) -> int:
    return round(step / (TOTAL_STEPS - 1) * 100)


def clamp_step(step: int) -> int:
    return max(0, min(step, TOTAL_STEPS - 1))


# Reducers. Each returns a new state and never touches its input.

def _recalculate(state: OnboardingState) -> OnboardingState:
    values = NutritionCalculator.compute_calculated_values(state.profile, state.activity, state.goals)
    return state.model_copy(update={"calculated_values": values})


def _mark_completed(completed_steps, step: int):
    if step in completed_steps:
        return list(completed_steps)
    return [*completed_steps, step]


def update_section(state: OnboardingState, section: str, partial: Dict[str, Any]) -> OnboardingState:
    """Shallow-merge ``partial`` into a section. Does not advance the cursor."""
    model = SECTION_MODELS.get(section)
    if model is None:
        raise UnknownSectionError(section)

    current = getattr(state, section)
    merged = model.model_validate({**current.model_dump(exclude_none=True), **partial})
    new_state = state.model_copy(update={section: merged})

    if section in CALCULATION_SECTIONS:
        new_state = _recalculate(new_state)
    return new_state


def set_units(
    state: OnboardingState,
    height_unit: Optional[str] = None,
    weight_unit: Optional[str] = None,
) -> OnboardingState:
    update = {}
    if height_unit:
        update["height_unit"] = height_unit
    if weight_unit:
        update["weight_unit"] = weight_unit
    return OnboardingState.model_validate({**state.model_dump(), **update})


def profile_to_metric(state: OnboardingState, partial: Dict[str, Any]) -> Dict[str, Any]:
    """Convert height/weight entered in the state's display units to cm/kg.

    Values are validated as profile fields first, so bad input raises
    ``ValidationError`` and numeric strings are accepted.
    """
    converted = dict(partial)
    entered = Profile.model_validate(partial)
    if state.height_unit == "inches" and entered.height is not None:
        converted["height"] = round(inches_to_cm(entered.height), 1)
    if state.weight_unit == "lbs" and entered.current_weight is not None:
        converted["current_weight"] = round(lbs_to_kg(entered.current_weight), 1)
    return converted


def next_step(state: OnboardingState) -> OnboardingState:
    return state.model_copy(update={
        "current_step": clamp_step(state.current_step + 1),
        "completed_steps": _mark_completed(state.completed_steps, state.current_step),
    })


def previous_step(state: OnboardingState) -> OnboardingState:
    return state.model_copy(update={"current_step": clamp_step(state.current_step - 1)})


def go_to_step(state: OnboardingState, step: int) -> OnboardingState:
    """Jump to ``step`` (clamped). The step before the target is marked completed."""
    target = clamp_step(step)
    completed = list(state.completed_steps)
    if target > 0:
        completed = _mark_completed(completed, target - 1)
    return state.model_copy(update={"current_step": target, "completed_steps": completed})


def complete(state: OnboardingState) -> OnboardingState:
    return state.model_copy(update={"is_completed": True})


def reset() -> OnboardingState:
    return OnboardingState()


def to_draft(state: OnboardingState, now: Optional[datetime] = None) -> Dict[str, Any]:
    draft = OnboardingDraft(
        **state.model_dump(exclude={"calculated_values"}),
        last_updated=now or datetime.now(timezone.utc),
        version=DRAFT_VERSION,
    )
    return draft.model_dump(mode="json")


def from_draft(blob: Dict[str, Any]) -> OnboardingState:
    draft = OnboardingDraft.model_validate(blob)
    data = draft.model_dump(exclude={"last_updated", "version"})
    data["current_step"] = clamp_step(data["current_step"])
    return _recalculate(OnboardingState.model_validate(data))


def build_committed_sections(state: OnboardingState) -> Optional[Dict[str, Any]]:
    """Committed document sections with defaults filled, or None if the
    profile still lacks a required field."""
    profile = state.profile
    if not (profile.name and profile.last_name and profile.age and profile.current_weight and profile.height):
        return None

    goals, activity, diet = state.goals, state.activity, state.diet
    preferences = state.preferences
    sections: Dict[str, Any] = {
        "profile": profile.model_copy(update={"gender": profile.gender or "other"}),
        "goals": Goals(
            primary_goal=goals.primary_goal or "maintenance",
            target_weight=goals.target_weight,
            timeline=goals.timeline or 12,
            weekly_goal=goals.weekly_goal if goals.weekly_goal is not None else 0.5,
            motivation=goals.motivation or 5,
        ),
        "activity": Activity(
            level=activity.level or "sedentary",
            occupation=activity.occupation or "office",
            exercise_types=activity.exercise_types,
            exercise_frequency=activity.exercise_frequency or 0,
            sleep_hours=activity.sleep_hours or 8,
        ),
        "diet": Diet(
            type=diet.type or "balanced",
            allergies=diet.allergies,
            intolerances=diet.intolerances,
            disliked_foods=diet.disliked_foods,
            cultural_restrictions=diet.cultural_restrictions,
        ),
        "preferences": Preferences(
            notifications=preferences.notifications or NotificationPreferences(),
            privacy=preferences.privacy or PrivacyPreferences(),
        ),
        "calculated_values": state.calculated_values,
        "commitment": state.commitment if state.commitment.first_name else None,
        "onboarding_completed": True,
        "onboarding_completed_at": datetime.now(timezone.utc),
    }
    if state.account.username:
        sections["account"] = state.account.model_copy(update={
            "created_at": state.account.created_at or datetime.now(timezone.utc),
            "preferences": state.account.preferences or AccountAgreements(),
        })
    return sections


class OnboardingWizard:
    """Store for the wizard state.

    Every action swaps in a new ``OnboardingState`` and schedules a
    fire-and-forget save of the whole draft to the local store.
    """

    def __init__(
        self,
        draft_store: LocalDraftStore,
        writes: Optional[BackgroundWrites] = None,
        state: Optional[OnboardingState] = None,
    ):
        self.draft_store = draft_store
        self.writes = writes or BackgroundWrites()
        self.state = state or OnboardingState()

    @property
    def total_steps(self) -> int:
        return TOTAL_STEPS

    @property
    def screens(self):
        return ONBOARDING_SCREENS

    def _apply(self, new_state: OnboardingState, persist: bool = True) -> OnboardingState:
        self.state = new_state
        if persist:
            self.writes.schedule(self.save_progress())
        return new_state

    # Section updates
    def update_section(self, section: str, partial: Dict[str, Any]) -> OnboardingState:
        return self._apply(update_section(self.state, section, partial), persist=False)

    def update_profile(self, partial: Dict[str, Any]) -> OnboardingState:
        return self.update_section("profile", profile_to_metric(self.state, partial))

    def set_units(self, height_unit: Optional[str] = None, weight_unit: Optional[str] = None) -> OnboardingState:
        return self._apply(set_units(self.state, height_unit, weight_unit), persist=False)

    # Navigation
    def next_step(self) -> OnboardingState:
        return self._apply(next_step(self.state))

    def previous_step(self) -> OnboardingState:
        return self._apply(previous_step(self.state))

    def go_to_step(self, step: int) -> OnboardingState:
        return self._apply(go_to_step(self.state, step))

    def reset_onboarding(self) -> OnboardingState:
        return self._apply(reset())

    async def complete_onboarding(
        self,
        remote_store: Optional[RemoteDocumentStore] = None,
        user_id: Optional[str] = None,
    ) -> OnboardingState:
        """Mark completion, save the draft, then sync committed sections.

        The local flag is set even when the remote sync fails.
        """
        self.state = complete(self.state)
        await self.save_progress()

        if remote_store is not None and user_id:
            await self.sync_to_remote(remote_store, user_id)
        return self.state

    async def sync_to_remote(self, remote_store: RemoteDocumentStore, user_id: str) -> GatewayResult[None]:
        sections = build_committed_sections(self.state)
        if sections is None:
            logger.warning("Missing required profile fields, skipping remote sync")
            return GatewayResult.failure("missing required profile fields")

        result = await remote_store.merge_document(user_id, sections)
        if result.ok:
            logger.info(f"Onboarding data synced for user {user_id}")
        return result

    # Persistence
    async def save_progress(self) -> GatewayResult[None]:
        return await self.draft_store.save(to_draft(self.state))

    async def load_progress(self) -> OnboardingState:
        """Restore the draft. Absent or corrupt data starts fresh."""
        result = await self.draft_store.load()
        if not result.ok or result.value is None:
            self.state = OnboardingState()
            return self.state

        try:
            self.state = from_draft(result.value)
        except ValidationError as e:
            logger.error(f"Stored onboarding draft is invalid, starting fresh: {e}")
            self.state = OnboardingState()
        return self.state

    async def flush(self) -> None:
        await self.writes.flush()
