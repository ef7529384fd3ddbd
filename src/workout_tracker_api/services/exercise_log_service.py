"""
Exercise logging and workout completion.

Logs hold what the user actually did for an exercise (weight, reps, done or
not). A workout completion marks a whole day as done and fills in completed
logs for every exercise that does not have one yet.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel

from workout_tracker_api.db import WorkoutStore
from workout_tracker_api.models import ExerciseLog, WorkoutCompletion

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CompleteWorkoutResult(BaseModel):
    """Outcome of marking a day complete"""
    completion: WorkoutCompletion
    already_completed: bool = False
    total_exercises: int = 0
    newly_completed: int = 0


class ExerciseLogService:
    """Per-exercise logs."""

    def __init__(self, store: WorkoutStore):
        self.store = store

    def _current_log(self, exercise_id: str) -> Optional[ExerciseLog]:
        rows = self.store.logs_for_exercises([exercise_id])
        if not rows:
            return None
        latest = max(rows, key=lambda r: r.get("logged_at") or "")
        return ExerciseLog.model_validate(latest)

    def load_logs_for_day(self, day_id: str) -> Dict[str, ExerciseLog]:
        """Logs of every exercise of a day, keyed by exercise id."""
        exercise_ids = self.store.exercise_ids_for_day(day_id)
        if not exercise_ids:
            return {}
        logs: Dict[str, ExerciseLog] = {}
        for row in sorted(self.store.logs_for_exercises(exercise_ids), key=lambda r: r.get("logged_at") or ""):
            log = ExerciseLog.model_validate(row)
            logs[log.exercise_id] = log
        return logs

    def toggle_completion(self, exercise_id: str) -> ExerciseLog:
        """Flip the completed flag of an exercise, creating its log if needed."""
        existing = self._current_log(exercise_id)
        completed = not (existing.completed if existing else False)
        data = {"completed": completed, "logged_at": _now()}

        if existing:
            row = self.store.update_log(existing.id, data)
        else:
            row = self.store.insert_log({"exercise_id": exercise_id, **data})
        return ExerciseLog.model_validate(row)

    def update_log(
        self,
        exercise_id: str,
        completed: bool,
        weight: Optional[float] = None,
        reps: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> ExerciseLog:
        """Record weight/reps/notes for an exercise (update if logged, else insert)."""
        data = {
            "exercise_id": exercise_id,
            "completed": completed,
            "weight": weight,
            "reps": reps,
            "notes": notes or None,
            "logged_at": _now(),
        }
        existing = self._current_log(exercise_id)
        if existing:
            row = self.store.update_log(existing.id, data)
        else:
            row = self.store.insert_log(data)
        return ExerciseLog.model_validate(row)

    def get_previous_log(self, exercise_id: str) -> Optional[ExerciseLog]:
        """Latest log with both weight and reps, used to suggest the next load."""
        row = self.store.latest_weighted_log(exercise_id)
        return ExerciseLog.model_validate(row) if row else None


class WorkoutCompletionService:
    """Day-level completion."""

    def __init__(self, store: WorkoutStore):
        self.store = store

    def complete_workout(self, day_id: str) -> CompleteWorkoutResult:
        existing = self.store.find_completion(day_id)
        exercise_ids = self.store.exercise_ids_for_day(day_id)

        completed_ids = {
            row["exercise_id"]
            for row in self.store.logs_for_exercises(exercise_ids)
            if row.get("completed")
        }
        now = _now()
        to_insert = [
            {"exercise_id": exercise_id, "completed": True, "logged_at": now}
            for exercise_id in exercise_ids
            if exercise_id not in completed_ids
        ]

        if existing:
            completion = existing
        else:
            completion = self.store.insert_completion({
                "day_id": day_id,
                "completed_at": now,
                "total_exercises": len(exercise_ids),
                "completed_exercises": len(exercise_ids),
            })
        self.store.insert_logs(to_insert)

        logger.info(f"Completed workout {day_id}: {len(to_insert)} exercises marked done")
        return CompleteWorkoutResult(
            completion=WorkoutCompletion.model_validate(completion),
            already_completed=existing is not None,
            total_exercises=len(exercise_ids),
            newly_completed=len(to_insert),
        )

    def is_workout_completed(self, day_id: str) -> bool:
        return self.store.find_completion(day_id) is not None
