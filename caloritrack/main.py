"""Main entry point for CaloriTrack."""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from loguru import logger

from caloritrack.api.routes import router as api_router
from caloritrack.config import get_settings
from caloritrack.db.local import LocalDraftStore
from caloritrack.db.supabase import RemoteDocumentStore
from caloritrack.log import setup_logging
from caloritrack.services.onboarding import OnboardingWizard
from caloritrack.services.recognition import FoodRecognitionClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire the stores and restore the onboarding draft."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file or None)

    app.state.wizard = OnboardingWizard(LocalDraftStore(settings.draft_store_path))
    await app.state.wizard.load_progress()

    if settings.remote_enabled:
        app.state.remote_store = RemoteDocumentStore()
    else:
        logger.warning("Supabase is not configured, user documents stay in memory")
        app.state.remote_store = None

    app.state.recognition_client = FoodRecognitionClient()
    app.state.sessions = {}
    logger.info(f"CaloriTrack started (onboarding step {app.state.wizard.state.current_step})")

    yield

    # Let pending draft and document writes land before exit
    await app.state.wizard.flush()
    for session in app.state.sessions.values():
        await session.flush()
    logger.info("CaloriTrack stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="CaloriTrack API",
        description="Onboarding, calorie tracking, streaks and achievements",
        version=get_settings().app_version,
        lifespan=lifespan,
    )
    app.include_router(api_router)
    return app


app = create_app()


def run():
    """Entry point for running the API server."""
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level="warning")


if __name__ == "__main__":
    run()
