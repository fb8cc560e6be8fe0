"""API routes for the onboarding wizard and the daily dashboard."""

from fastapi import APIRouter, Depends, HTTPException, Header, Request
from pydantic import BaseModel, Field, ValidationError
from typing import Any, Dict, List, Optional
import datetime as dt

from caloritrack.models.food import FoodAnalysis, RecognitionRequest
from caloritrack.models.onboarding import OnboardingState
from caloritrack.models.tracking import Achievement, DailyLog, MealLog, MealLogCreate, StreakData
from caloritrack.models.user import Activity, CalculatedValues, Goals, HeightUnit, Profile, WeightUnit
from caloritrack.services.dashboard import DashboardSession
from caloritrack.services.onboarding import (
    OnboardingWizard,
    UnknownSectionError,
    get_step_for_screen,
    is_valid_screen,
    progress_percentage,
)
from caloritrack.services.recognition import ImageFormatError, meal_from_analysis


router = APIRouter(prefix="/api/v1", tags=["CaloriTrack"])


class OnboardingView(BaseModel):
    """Wizard state as returned to clients."""
    state: OnboardingState
    calculated_values: CalculatedValues
    current_screen: str
    total_steps: int
    progress: int


class UnitsUpdate(BaseModel):
    height_unit: Optional[HeightUnit] = None
    weight_unit: Optional[WeightUnit] = None


class ScreenStep(BaseModel):
    screen: str
    step: int


class WaterRequest(BaseModel):
    glasses: int = Field(1, ge=-20, le=20)
    date: Optional[dt.date] = None


class StepsRequest(BaseModel):
    count: int = Field(ge=0)
    date: Optional[dt.date] = None


class ProfileView(BaseModel):
    """Committed sections that drive the energy budget."""
    profile: Profile
    goals: Goals
    activity: Activity
    calculated_values: CalculatedValues


class RecognitionResponse(BaseModel):
    analysis: FoodAnalysis
    meal: MealLog


def get_wizard(request: Request) -> OnboardingWizard:
    return request.app.state.wizard


async def get_session(request: Request, x_user_id: str = Header(...)) -> DashboardSession:
    """Dashboard session for the calling user, loaded on first use."""
    sessions: Dict[str, DashboardSession] = request.app.state.sessions
    session = sessions.get(x_user_id)
    if session is None:
        session = DashboardSession(x_user_id, request.app.state.remote_store)
        await session.load()
        sessions[x_user_id] = session
    return session


def _view(wizard: OnboardingWizard) -> OnboardingView:
    state = wizard.state
    return OnboardingView(
        state=state,
        calculated_values=state.calculated_values,
        current_screen=state.current_screen,
        total_steps=state.total_steps,
        progress=progress_percentage(state.current_step),
    )


# Onboarding

@router.get("/onboarding", response_model=OnboardingView)
async def get_onboarding(wizard: OnboardingWizard = Depends(get_wizard)):
    return _view(wizard)


@router.patch("/onboarding/{section}", response_model=OnboardingView)
async def update_onboarding_section(
    section: str,
    data: Dict[str, Any],
    wizard: OnboardingWizard = Depends(get_wizard),
):
    """Merge partial data into one wizard section.

    Profile height and weight are read in the wizard's selected units.
    """
    try:
        if section == "profile":
            wizard.update_profile(data)
        else:
            wizard.update_section(section, data)
    except UnknownSectionError:
        raise HTTPException(status_code=400, detail=f"Unknown section: {section}")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))
    return _view(wizard)


@router.put("/onboarding/units", response_model=OnboardingView)
async def set_units(units: UnitsUpdate, wizard: OnboardingWizard = Depends(get_wizard)):
    wizard.set_units(units.height_unit, units.weight_unit)
    return _view(wizard)


@router.post("/onboarding/next", response_model=OnboardingView)
async def next_step(wizard: OnboardingWizard = Depends(get_wizard)):
    wizard.next_step()
    return _view(wizard)


@router.post("/onboarding/previous", response_model=OnboardingView)
async def previous_step(wizard: OnboardingWizard = Depends(get_wizard)):
    wizard.previous_step()
    return _view(wizard)


@router.post("/onboarding/goto/{step}", response_model=OnboardingView)
async def go_to_step(step: int, wizard: OnboardingWizard = Depends(get_wizard)):
    wizard.go_to_step(step)
    return _view(wizard)


@router.post("/onboarding/complete", response_model=OnboardingView)
async def complete_onboarding(
    request: Request,
    wizard: OnboardingWizard = Depends(get_wizard),
    x_user_id: Optional[str] = Header(None),
):
    await wizard.complete_onboarding(request.app.state.remote_store, x_user_id)
    if x_user_id:
        # Reload the dashboard with the committed profile next time
        request.app.state.sessions.pop(x_user_id, None)
    return _view(wizard)


@router.post("/onboarding/reset", response_model=OnboardingView)
async def reset_onboarding(wizard: OnboardingWizard = Depends(get_wizard)):
    wizard.reset_onboarding()
    return _view(wizard)


@router.get("/onboarding/screens/{screen_name}", response_model=ScreenStep)
async def get_screen_step(screen_name: str):
    if not is_valid_screen(screen_name):
        raise HTTPException(status_code=404, detail=f"Unknown screen: {screen_name}")
    return ScreenStep(screen=screen_name, step=get_step_for_screen(screen_name))


# Dashboard

@router.get("/dashboard/today", response_model=DailyLog)
async def get_today(session: DashboardSession = Depends(get_session)):
    return session.today_log()


@router.get("/dashboard/logs/{log_date}", response_model=DailyLog)
async def get_daily_log(log_date: dt.date, session: DashboardSession = Depends(get_session)):
    return session.get_daily_log(log_date)


@router.post("/meals", response_model=MealLog)
async def add_meal(meal: MealLogCreate, session: DashboardSession = Depends(get_session)):
    """Log a manually entered, barcode or quick-add meal."""
    return session.add_meal(meal)


@router.post("/meals/recognize", response_model=RecognitionResponse)
async def recognize_meal(
    request_body: RecognitionRequest,
    request: Request,
    session: DashboardSession = Depends(get_session),
):
    """Recognize a meal photo and log the estimate."""
    client = request.app.state.recognition_client
    try:
        analysis = await client.analyze(request_body.image_base64, request_body.prompt)
    except ImageFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        meal_data = meal_from_analysis(analysis, meal_type=request_body.meal_type)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))

    meal = session.add_meal(meal_data)
    return RecognitionResponse(analysis=analysis, meal=meal)


@router.patch("/profile/{section}", response_model=ProfileView)
async def update_profile_section(
    section: str,
    data: Dict[str, Any],
    session: DashboardSession = Depends(get_session),
):
    """Edit profile, goals or activity after onboarding and recompute goals."""
    try:
        document = session.update_section(section, data)
    except UnknownSectionError:
        raise HTTPException(status_code=400, detail=f"Unknown section: {section}")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))
    return ProfileView(
        profile=document.profile,
        goals=document.goals,
        activity=document.activity,
        calculated_values=document.calculated_values,
    )


@router.get("/meals/recent", response_model=List[MealLog])
async def get_recent_meals(limit: int = 10, session: DashboardSession = Depends(get_session)):
    return session.recent_meals(limit)


@router.post("/water", response_model=DailyLog)
async def log_water(request_body: WaterRequest, session: DashboardSession = Depends(get_session)):
    return session.log_water(request_body.glasses, request_body.date)


@router.put("/steps", response_model=DailyLog)
async def update_steps(request_body: StepsRequest, session: DashboardSession = Depends(get_session)):
    return session.update_steps(request_body.count, request_body.date)


@router.get("/streaks", response_model=StreakData)
async def get_streaks(session: DashboardSession = Depends(get_session)):
    return session.streaks


@router.get("/achievements", response_model=List[Achievement])
async def get_achievements(session: DashboardSession = Depends(get_session)):
    return session.document.achievements
