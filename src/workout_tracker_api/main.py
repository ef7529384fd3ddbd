"""Main FastAPI application."""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from workout_tracker_api.api.admin_routes import router as admin_router
from workout_tracker_api.api.workout_routes import router as workout_router
from workout_tracker_api.config import settings
from workout_tracker_api.db import WorkoutStore, WorkoutStoreError
from workout_tracker_api.services.import_session import ImportSessionService

logger = logging.getLogger(__name__)


async def workout_store_error_handler(request: Request, exc: WorkoutStoreError):
    logger.error(f"Backend error on {request.url.path}: {exc.describe()}")
    return JSONResponse(status_code=502, content={"detail": exc.describe()})


def create_app(store: Optional[WorkoutStore] = None) -> FastAPI:
    """Build the application around one WorkoutStore.

    Without an explicit store, one is created from the Supabase settings; it
    stays None (and storage routes answer 503) when credentials are missing.
    """
    app = FastAPI(title="Workout Tracker API")

    app.state.workout_store = store if store is not None else WorkoutStore.from_settings(settings)
    app.state.import_sessions = ImportSessionService(
        max_upload_bytes=settings.MAX_UPLOAD_BYTES,
        max_json_nodes=settings.MAX_JSON_NODES,
        max_sessions=settings.MAX_IMPORT_SESSIONS,
    )

    # Configure CORS to allow requests from the UI
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(WorkoutStoreError, workout_store_error_handler)
    app.include_router(workout_router)
    app.include_router(admin_router)
    return app


app = create_app()
