"""FastAPI dependencies handing out the objects built at startup."""
from fastapi import HTTPException, Request

from workout_tracker_api.db import WorkoutStore
from workout_tracker_api.services.import_session import ImportSessionService


def get_workout_store(request: Request) -> WorkoutStore:
    store = getattr(request.app.state, "workout_store", None)
    if store is None:
        raise HTTPException(
            status_code=503,
            detail="Workout storage is not configured (missing SUPABASE_URL / key)",
        )
    return store


def get_import_sessions(request: Request) -> ImportSessionService:
    return request.app.state.import_sessions
