"""Tests for the onboarding wizard."""

import json

import pytest
from pydantic import ValidationError

from caloritrack.models.onboarding import ONBOARDING_SCREENS, TOTAL_STEPS, OnboardingState
from caloritrack.services import onboarding
from caloritrack.services.onboarding import OnboardingWizard, UnknownSectionError


class TestScreens:
    def test_thirty_screens_from_welcome_to_summary(self):
        assert TOTAL_STEPS == 30
        assert ONBOARDING_SCREENS[0] == "welcome"
        assert ONBOARDING_SCREENS[-1] == "summary"

    def test_step_for_screen(self):
        assert onboarding.get_step_for_screen("gender") == 3
        assert onboarding.get_step_for_screen("summary") == 29

    def test_unknown_screen(self):
        assert onboarding.get_step_for_screen("nope") == 0
        assert not onboarding.is_valid_screen("nope")
        assert onboarding.is_valid_screen("sleep-hours")

    def test_progress_percentage(self):
        assert onboarding.progress_percentage(0) == 0
        assert onboarding.progress_percentage(TOTAL_STEPS - 1) == 100


class TestSectionUpdates:
    def test_merge_keeps_existing_fields(self):
        state = onboarding.update_section(OnboardingState(), "goals", {"primary_goal": "weight_loss"})
        state = onboarding.update_section(state, "goals", {"target_weight": 70})
        assert state.goals.primary_goal == "weight_loss"
        assert state.goals.target_weight == 70

    def test_input_state_untouched(self, profile_data):
        original = OnboardingState()
        updated = onboarding.update_section(original, "profile", profile_data)
        assert original.profile.name is None
        assert updated.profile.name == "Ahmet"

    def test_does_not_move_cursor(self):
        state = onboarding.update_section(OnboardingState(current_step=4), "diet", {"type": "vegan"})
        assert state.current_step == 4
        assert state.completed_steps == []

    def test_unknown_section(self):
        with pytest.raises(UnknownSectionError):
            onboarding.update_section(OnboardingState(), "hobbies", {"a": 1})

    def test_recalculates_on_profile_activity_goals(self, profile_data):
        state = onboarding.update_section(OnboardingState(), "profile", profile_data)
        assert state.calculated_values.tdee == 2181  # sedentary
        state = onboarding.update_section(state, "activity", {"level": "moderately_active"})
        assert state.calculated_values.bmr == 1817
        assert state.calculated_values.tdee == 2817

    def test_incomplete_profile_has_zero_values(self):
        state = onboarding.update_section(OnboardingState(), "profile", {"name": "Ahmet", "age": 30})
        assert state.calculated_values.daily_calorie_goal == 0

    def test_imperial_units_converted(self):
        state = onboarding.set_units(OnboardingState(), height_unit="inches", weight_unit="lbs")
        converted = onboarding.profile_to_metric(state, {"height": 70, "current_weight": 172})
        assert converted["height"] == 177.8
        assert converted["current_weight"] == 78.0

    def test_imperial_numeric_strings_converted(self):
        state = onboarding.set_units(OnboardingState(), height_unit="inches", weight_unit="lbs")
        converted = onboarding.profile_to_metric(state, {"height": "70", "current_weight": "170"})
        assert converted["height"] == 177.8
        assert converted["current_weight"] == 77.1

    def test_imperial_non_numeric_rejected(self):
        state = onboarding.set_units(OnboardingState(), weight_unit="lbs")
        with pytest.raises(ValidationError):
            onboarding.profile_to_metric(state, {"current_weight": "heavy"})

    def test_wizard_imperial_string_weight(self, draft_store):
        wizard = OnboardingWizard(draft_store)
        wizard.set_units(weight_unit="lbs")
        wizard.update_profile({"current_weight": "170"})
        assert wizard.state.profile.current_weight == 77.1

    def test_out_of_bounds_value_rejected(self):
        state = onboarding.update_section(OnboardingState(), "goals", {"motivation": 7})
        with pytest.raises(ValidationError):
            onboarding.update_section(state, "goals", {"motivation": 11})
        assert state.goals.motivation == 7


class TestNavigation:
    def test_next_step_marks_previous_completed(self):
        state = onboarding.next_step(OnboardingState())
        assert state.current_step == 1
        assert state.completed_steps == [0]

    def test_next_step_clamps_at_last(self):
        state = OnboardingState(current_step=TOTAL_STEPS - 1)
        state = onboarding.next_step(onboarding.next_step(state))
        assert state.current_step == TOTAL_STEPS - 1
        assert state.completed_steps == [TOTAL_STEPS - 1]

    def test_previous_step_clamps_at_zero(self):
        state = onboarding.previous_step(OnboardingState())
        assert state.current_step == 0

    def test_previous_step_keeps_completed(self):
        state = onboarding.next_step(onboarding.next_step(OnboardingState()))
        state = onboarding.previous_step(state)
        assert state.current_step == 1
        assert state.completed_steps == [0, 1]

    def test_go_to_step(self):
        state = onboarding.go_to_step(OnboardingState(), 5)
        assert state.current_step == 5
        assert state.completed_steps == [4]

    @pytest.mark.parametrize("step,expected", [(-3, 0), (100, TOTAL_STEPS - 1)])
    def test_go_to_step_clamps(self, step, expected):
        assert onboarding.go_to_step(OnboardingState(), step).current_step == expected

    def test_go_to_zero_marks_nothing(self):
        assert onboarding.go_to_step(OnboardingState(current_step=3), 0).completed_steps == []

    def test_reset(self):
        state = onboarding.reset()
        assert state.current_step == 0
        assert state.completed_steps == []
        assert state.profile.name is None
        assert not state.is_completed


class TestCommittedSections:
    def test_missing_required_field(self, profile_data):
        profile_data.pop("last_name")
        state = onboarding.update_section(OnboardingState(), "profile", profile_data)
        assert onboarding.build_committed_sections(state) is None

    def test_defaults_filled(self, profile_data):
        state = onboarding.update_section(OnboardingState(), "profile", profile_data)
        sections = onboarding.build_committed_sections(state)
        assert sections["goals"].primary_goal == "maintenance"
        assert sections["goals"].timeline == 12
        assert sections["activity"].level == "sedentary"
        assert sections["diet"].type == "balanced"
        assert sections["preferences"].notifications.achievements is True
        assert sections["onboarding_completed"] is True
        assert "account" not in sections


class TestOnboardingWizard:
    @pytest.mark.asyncio
    async def test_navigation_persists_draft(self, draft_store, profile_data):
        wizard = OnboardingWizard(draft_store)
        wizard.update_profile(profile_data)
        wizard.next_step()
        wizard.next_step()
        await wizard.flush()

        restored = OnboardingWizard(draft_store)
        state = await restored.load_progress()
        assert state.current_step == 2
        assert state.completed_steps == [0, 1]
        assert state.profile.name == "Ahmet"
        assert state.calculated_values == wizard.state.calculated_values

    @pytest.mark.asyncio
    async def test_draft_has_version_and_timestamp(self, draft_store):
        wizard = OnboardingWizard(draft_store)
        wizard.go_to_step(3)
        await wizard.flush()

        blob = json.loads(draft_store.path.read_text())
        assert blob["version"] == "1.0.0"
        assert blob["last_updated"]
        assert blob["current_step"] == 3
        assert "calculated_values" not in blob

    @pytest.mark.asyncio
    async def test_missing_draft_starts_fresh(self, draft_store):
        state = await OnboardingWizard(draft_store).load_progress()
        assert state == OnboardingState()

    @pytest.mark.asyncio
    async def test_corrupt_draft_starts_fresh(self, draft_store):
        draft_store.base_path.mkdir(parents=True, exist_ok=True)
        draft_store.path.write_text("{not json")
        state = await OnboardingWizard(draft_store).load_progress()
        assert state == OnboardingState()

    @pytest.mark.asyncio
    async def test_invalid_draft_starts_fresh(self, draft_store):
        await draft_store.save({"profile": {"gender": "robot"}})
        state = await OnboardingWizard(draft_store).load_progress()
        assert state == OnboardingState()

    @pytest.mark.asyncio
    async def test_out_of_range_step_clamped_on_load(self, draft_store):
        await draft_store.save({"current_step": 99})
        state = await OnboardingWizard(draft_store).load_progress()
        assert state.current_step == TOTAL_STEPS - 1

    @pytest.mark.asyncio
    async def test_reset_overwrites_draft(self, draft_store):
        wizard = OnboardingWizard(draft_store)
        wizard.go_to_step(10)
        wizard.reset_onboarding()
        await wizard.flush()

        state = await OnboardingWizard(draft_store).load_progress()
        assert state.current_step == 0
        assert state.completed_steps == []

    @pytest.mark.asyncio
    async def test_complete_syncs_to_remote(self, draft_store, remote_store, profile_data):
        wizard = OnboardingWizard(draft_store)
        wizard.update_profile(profile_data)
        wizard.update_section("account", {"username": "ahmet"})
        state = await wizard.complete_onboarding(remote_store, "user-1")

        assert state.is_completed
        row = remote_store.rows["user-1"]
        assert row["onboarding_completed"] is True
        assert row["profile"]["name"] == "Ahmet"
        assert row["calculated_values"]["bmr"] == 1817
        assert row["account"]["username"] == "ahmet"

    @pytest.mark.asyncio
    async def test_complete_without_required_fields_skips_remote(self, draft_store, remote_store):
        wizard = OnboardingWizard(draft_store)
        wizard.update_profile({"name": "Ahmet"})
        state = await wizard.complete_onboarding(remote_store, "user-1")

        assert state.is_completed
        assert remote_store.writes == []

    @pytest.mark.asyncio
    async def test_complete_keeps_local_flag_when_remote_fails(self, draft_store, failing_remote_store, profile_data):
        wizard = OnboardingWizard(draft_store)
        wizard.update_profile(profile_data)
        state = await wizard.complete_onboarding(failing_remote_store, "user-1")

        assert state.is_completed
        restored = await OnboardingWizard(draft_store).load_progress()
        assert restored.is_completed
