"""Completion progress of a day's workout, overall and per section."""
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field

from workout_tracker_api.models import ExerciseLog, ProgramDay


class SectionProgress(BaseModel):
    section_id: str
    section_name: str
    total_exercises: int = 0
    completed_exercises: int = 0
    completion_percentage: int = 0


class WorkoutProgress(BaseModel):
    total_exercises: int = 0
    completed_exercises: int = 0
    completion_percentage: int = 0
    section_progress: List[SectionProgress] = Field(default_factory=list)


def _percent(done: int, total: int) -> int:
    # Half rounds up, 1 of 8 -> 13
    return int(done * 100 / total + 0.5) if total else 0


def calculate_workout_progress(
    workout: Optional[ProgramDay],
    logs: Mapping[str, ExerciseLog],
) -> WorkoutProgress:
    if workout is None:
        return WorkoutProgress()

    total = completed = 0
    sections = []
    for section in workout.workout_sections:
        section_total = section_done = 0
        for component in section.workout_components:
            for exercise in component.exercises:
                section_total += 1
                log = logs.get(exercise.id)
                if log is not None and log.completed:
                    section_done += 1

        total += section_total
        completed += section_done
        sections.append(SectionProgress(
            section_id=section.id,
            section_name=section.display_name,
            total_exercises=section_total,
            completed_exercises=section_done,
            completion_percentage=_percent(section_done, section_total),
        ))

    return WorkoutProgress(
        total_exercises=total,
        completed_exercises=completed,
        completion_percentage=_percent(completed, total),
        section_progress=sections,
    )
