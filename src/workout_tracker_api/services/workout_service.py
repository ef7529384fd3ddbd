"""Read access to programs and the workout of a given day."""
import logging
from datetime import date
from typing import List, Optional

from workout_tracker_api.db import WorkoutStore
from workout_tracker_api.models import Program, ProgramDay

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class ProgramNotFound(RuntimeError):
    pass


def weekday_name(day: date) -> str:
    """English weekday name used as the day key of a program ("Monday"...)."""
    return WEEKDAY_NAMES[day.weekday()]


class WorkoutService:
    """Programs and day workouts as the tracker shows them."""

    def __init__(self, store: WorkoutStore):
        self.store = store

    def list_programs(self) -> List[Program]:
        """All programs, newest first."""
        return [Program.model_validate(row) for row in self.store.list_programs()]

    def get_day_workout(self, program_name: str, day_name: str) -> Optional[ProgramDay]:
        """
        The day's workout with sections, components and exercises in order.

        Returns None when the program has no entry for that day (rest day).

        Raises:
            ProgramNotFound: if no program has that name
        """
        program = self.store.find_program_by_name(program_name)
        if not program:
            raise ProgramNotFound(f"Program {program_name!r} not found")

        row = self.store.get_day_workout(program["id"], day_name)
        if not row:
            logger.debug(f"No workout for {program_name} on {day_name}")
            return None
        return ProgramDay.model_validate(row).sort_children()

    def get_workout_for_date(self, program_name: str, on: date) -> Optional[ProgramDay]:
        return self.get_day_workout(program_name, weekday_name(on))
