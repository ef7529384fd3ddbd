"""API routes for reading workouts and logging exercises."""

from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from workout_tracker_api.api.dependencies import get_workout_store
from workout_tracker_api.db import WorkoutStore
from workout_tracker_api.models import ExerciseLog, Program, ProgramDay
from workout_tracker_api.services.exercise_log_service import (
    CompleteWorkoutResult,
    ExerciseLogService,
    WorkoutCompletionService,
)
from workout_tracker_api.services.workout_progress import WorkoutProgress, calculate_workout_progress
from workout_tracker_api.services.workout_service import ProgramNotFound, WorkoutService

router = APIRouter(tags=["Workouts"])


class ExerciseLogUpdate(BaseModel):
    """Weight/reps/notes entered for an exercise"""
    completed: bool = False
    weight: Optional[float] = None
    reps: Optional[int] = None
    notes: Optional[str] = None


class WorkoutCompletionStatus(BaseModel):
    day_id: str
    completed: bool


@router.get("/health")
def health():
    return {"status": "ok"}


# ============================================================================
# Programs & day workouts
# ============================================================================

@router.get("/programs", response_model=List[Program])
def list_programs(store: WorkoutStore = Depends(get_workout_store)):
    """All programs, newest first."""
    return WorkoutService(store).list_programs()


@router.get("/programs/{program_name}/days/{day_name}", response_model=Optional[ProgramDay])
def get_day_workout(
    program_name: str,
    day_name: str,
    store: WorkoutStore = Depends(get_workout_store),
):
    """A day's workout, or null for a rest day."""
    try:
        return WorkoutService(store).get_day_workout(program_name, day_name)
    except ProgramNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/programs/{program_name}/workout", response_model=Optional[ProgramDay])
def get_workout_for_date(
    program_name: str,
    on: date = Query(..., description="Calendar date; its weekday selects the program day"),
    store: WorkoutStore = Depends(get_workout_store),
):
    try:
        return WorkoutService(store).get_workout_for_date(program_name, on)
    except ProgramNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/programs/{program_name}/days/{day_name}/progress", response_model=WorkoutProgress)
def get_day_progress(
    program_name: str,
    day_name: str,
    store: WorkoutStore = Depends(get_workout_store),
):
    """Completed vs. total exercises for the day and each of its sections."""
    try:
        workout = WorkoutService(store).get_day_workout(program_name, day_name)
    except ProgramNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    logs = ExerciseLogService(store).load_logs_for_day(workout.id) if workout else {}
    return calculate_workout_progress(workout, logs)


# ============================================================================
# Exercise logs
# ============================================================================

@router.get("/days/{day_id}/logs", response_model=Dict[str, ExerciseLog])
def get_day_logs(day_id: str, store: WorkoutStore = Depends(get_workout_store)):
    """Logs of the day's exercises keyed by exercise id."""
    return ExerciseLogService(store).load_logs_for_day(day_id)


@router.post("/exercises/{exercise_id}/toggle", response_model=ExerciseLog)
def toggle_exercise(exercise_id: str, store: WorkoutStore = Depends(get_workout_store)):
    return ExerciseLogService(store).toggle_completion(exercise_id)


@router.put("/exercises/{exercise_id}/log", response_model=ExerciseLog)
def update_exercise_log(
    exercise_id: str,
    payload: ExerciseLogUpdate,
    store: WorkoutStore = Depends(get_workout_store),
):
    return ExerciseLogService(store).update_log(
        exercise_id,
        completed=payload.completed,
        weight=payload.weight,
        reps=payload.reps,
        notes=payload.notes,
    )


@router.get("/exercises/{exercise_id}/previous-log", response_model=Optional[ExerciseLog])
def get_previous_exercise_log(exercise_id: str, store: WorkoutStore = Depends(get_workout_store)):
    """Most recent log with weight and reps, for load suggestions."""
    return ExerciseLogService(store).get_previous_log(exercise_id)


# ============================================================================
# Workout completion
# ============================================================================

@router.post("/days/{day_id}/complete", response_model=CompleteWorkoutResult)
def complete_workout(day_id: str, store: WorkoutStore = Depends(get_workout_store)):
    """Mark the day done and every exercise without a completed log as done."""
    return WorkoutCompletionService(store).complete_workout(day_id)


@router.get("/days/{day_id}/completion", response_model=WorkoutCompletionStatus)
def get_workout_completion(day_id: str, store: WorkoutStore = Depends(get_workout_store)):
    return WorkoutCompletionStatus(
        day_id=day_id,
        completed=WorkoutCompletionService(store).is_workout_completed(day_id),
    )
