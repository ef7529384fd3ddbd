"""
Admin API Routes

Bulk import of workout plans from JSON files:
1. Validate - check structure and summarise what would be written
2. Import - write programs, days, sections, components and exercises

plus a connectivity check and a confirmation-gated wipe of all data.
"""

from typing import Any

from fastapi import APIRouter, Depends, File as FastAPIFile, HTTPException, Request, UploadFile
from pydantic import BaseModel

from workout_tracker_api.api.dependencies import get_import_sessions, get_workout_store
from workout_tracker_api.db import WorkoutStore
from workout_tracker_api.services.import_session import (
    ImportNotAllowed,
    ImportSession,
    ImportSessionNotFound,
    ImportSessionService,
)
from workout_tracker_api.services.upload_guard import UploadRejected, UploadTooLarge, load_workout_upload
from workout_tracker_api.services.workout_importer import (
    ClearResult,
    ImportResult,
    WorkoutImporter,
    clear_all_workout_data,
    probe_database_connection,
)
from workout_tracker_api.services.workout_validator import ValidationResult, validate_workout_json

router = APIRouter(prefix="/admin", tags=["Admin Import"])


class ClearRequest(BaseModel):
    """Request to delete all workout data"""
    confirmation: str


async def _read_json_body(request: Request) -> Any:
    """Run the raw request body through the same checks as a file upload."""
    content = await request.body()
    try:
        return load_workout_upload(content)
    except UploadTooLarge as e:
        raise HTTPException(status_code=413, detail=str(e))
    except UploadRejected as e:
        raise HTTPException(status_code=400, detail=str(e))


# ============================================================================
# Validate & Import (JSON body)
# ============================================================================

@router.post("/validate", response_model=ValidationResult)
async def validate_workout_plan(request: Request):
    """
    Validate a workout plan without writing anything.

    Returns errors, warnings and summary counts (programs, days, sections,
    components, exercises).
    """
    data = await _read_json_body(request)
    return validate_workout_json(data)


@router.post("/import", response_model=ImportResult)
async def import_workout_plan(
    request: Request,
    store: WorkoutStore = Depends(get_workout_store),
):
    """
    Validate and import a workout plan.

    Returns 400 with the validation errors when the plan is invalid. A
    successful result may still have skipped rows; compare ``stats`` with the
    validation summary.
    """
    data = await _read_json_body(request)
    validation = validate_workout_json(data)
    if not validation.is_valid:
        raise HTTPException(
            status_code=400,
            detail={"message": "JSON structure validation failed", "errors": validation.errors},
        )
    return await WorkoutImporter(store).import_workout_data(data)


# ============================================================================
# Import sessions (file upload)
# ============================================================================

@router.post("/sessions", response_model=ImportSession)
async def create_import_session(
    file: UploadFile = FastAPIFile(...),
    sessions: ImportSessionService = Depends(get_import_sessions),
):
    """
    Select a JSON file for import.

    The file is checked and validated right away; the session ends up
    ``idle`` (ready to import) or ``error``.
    """
    content = await file.read()
    return sessions.select_file(file.filename or "upload.json", content)


@router.get("/sessions/{session_id}", response_model=ImportSession)
async def get_import_session(
    session_id: str,
    sessions: ImportSessionService = Depends(get_import_sessions),
):
    try:
        return sessions.get_session(session_id)
    except ImportSessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/sessions/{session_id}/import", response_model=ImportSession)
async def run_import_session(
    session_id: str,
    sessions: ImportSessionService = Depends(get_import_sessions),
    store: WorkoutStore = Depends(get_workout_store),
):
    """Import the file of a validated session."""
    try:
        return await sessions.run_import(session_id, store)
    except ImportSessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ImportNotAllowed as e:
        raise HTTPException(status_code=409, detail=str(e))


# ============================================================================
# Maintenance
# ============================================================================

@router.post("/test-connection", response_model=ImportResult)
async def test_connection(store: WorkoutStore = Depends(get_workout_store)):
    """Read, insert and delete a throwaway program to check credentials and schema."""
    return await probe_database_connection(store)


@router.post("/clear", response_model=ClearResult)
async def clear_workout_data(
    request: ClearRequest,
    store: WorkoutStore = Depends(get_workout_store),
):
    """
    Delete ALL workout data, logs included.

    The confirmation must match the fixed phrase exactly.
    """
    result = await clear_all_workout_data(store, request.confirmation)
    if not result.confirmed:
        raise HTTPException(status_code=400, detail=result.message)
    return result
