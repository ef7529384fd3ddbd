"""
Workout Importer

Writes a validated workout plan into Supabase, parent before child:

1. Program - upsert by name
2. Day - upsert by (program, weekday name)
3. Clear the day's existing sections, components and exercises
4. Section - insert, keeping its position as order_index
5. Component - insert, keeping its position as order_index
6. Exercise - insert every resolved exercise of the component

What happens when a write fails is decided per level by an error policy
table: by default a program failure aborts the whole import and every other
level is logged and skipped. The import is not atomic; rows written before a
failure stay written.

Also provides the connectivity probe and the confirmation-gated wipe used by
the admin screen.
"""

import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from workout_tracker_api.db import (
    EXERCISE_LOGS,
    EXERCISES,
    PROGRAM_DAYS,
    PROGRAMS,
    WORKOUT_COMPLETIONS,
    WORKOUT_COMPONENTS,
    WORKOUT_SECTIONS,
    WorkoutStore,
    WorkoutStoreError,
)
from workout_tracker_api.models import (
    ComponentEntry,
    DayEntry,
    ExerciseEntry,
    ProgramEntry,
    SectionEntry,
    WorkoutDocument,
    WorkoutDocumentError,
    parse_workout_document,
)

logger = logging.getLogger(__name__)

ImportLevel = Literal["program", "day", "section", "component", "exercise"]

CLEAR_CONFIRMATION_PHRASE = "DELETE ALL WORKOUT DATA"

# Reverse dependency order: children before parents
CLEAR_ORDER = [
    EXERCISE_LOGS,
    WORKOUT_COMPLETIONS,
    EXERCISES,
    WORKOUT_COMPONENTS,
    WORKOUT_SECTIONS,
    PROGRAM_DAYS,
    PROGRAMS,
]


class ErrorPolicy(str, Enum):
    """What to do when a write at some level of the tree fails."""
    ABORT = "abort"  # stop the import and report failure
    SKIP = "skip"    # log, skip this node and its children, keep going


DEFAULT_ERROR_POLICY: Dict[str, ErrorPolicy] = {
    "program": ErrorPolicy.ABORT,
    "day": ErrorPolicy.SKIP,
    "section": ErrorPolicy.SKIP,
    "component": ErrorPolicy.SKIP,
    "exercise": ErrorPolicy.SKIP,
}


# ============================================================================
# Pydantic Models
# ============================================================================

class ImportStats(BaseModel):
    """Rows actually written by an import"""
    programs: int = 0
    days: int = 0
    sections: int = 0
    components: int = 0
    exercises: int = 0


class ImportResult(BaseModel):
    """Result of an import or connectivity check"""
    success: bool
    message: str
    stats: Optional[ImportStats] = None
    error: Optional[str] = None


class ClearResult(BaseModel):
    """Result of wiping all workout data"""
    success: bool
    message: str
    confirmed: bool = True
    cleared_tables: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class ImportAborted(RuntimeError):
    """A write failed at a level whose policy is ABORT."""

    def __init__(self, action: str, error: WorkoutStoreError):
        super().__init__(f"Failed to {action}")
        self.action = action
        self.error = error


# ============================================================================
# Importer
# ============================================================================

class WorkoutImporter:
    """
    Walks a workout document and writes it through a WorkoutStore.

    Program and day rows are matched by natural key and updated in place, so
    re-importing the same file leaves one row each. Everything below a day is
    replaced wholesale on every import.
    """

    def __init__(self, store: WorkoutStore, error_policy: Optional[Mapping[str, ErrorPolicy]] = None):
        self.store = store
        self.error_policy: Dict[str, ErrorPolicy] = dict(DEFAULT_ERROR_POLICY)
        if error_policy:
            self.error_policy.update(error_policy)
        self.stats = ImportStats()

    def _attempt(
        self,
        level: ImportLevel,
        action: str,
        write: Callable[[], Any],
    ) -> Tuple[bool, Any]:
        """Run one backend call under the error policy for ``level``.

        Returns (True, value) on success and (False, None) when the failure
        was skipped. Raises ImportAborted when the level's policy is ABORT.
        """
        try:
            return True, write()
        except WorkoutStoreError as e:
            if self.error_policy.get(level, ErrorPolicy.SKIP) == ErrorPolicy.ABORT:
                logger.error(f"Failed to {action}: {e.describe()}")
                raise ImportAborted(action, e) from e
            logger.error(f"Error trying to {action}, skipping: {e.describe()}")
            return False, None

    async def import_workout_data(self, data: Any) -> ImportResult:
        """
        Import a workout plan.

        Args:
            data: Raw JSON (list with one week object) or a decoded WorkoutDocument

        Returns:
            ImportResult. A successful result can still have skipped rows;
            compare ``stats`` with the validation summary to detect that.
        """
        self.stats = ImportStats()

        if isinstance(data, WorkoutDocument):
            document = data
        else:
            try:
                document = parse_workout_document(data)
            except WorkoutDocumentError as e:
                return ImportResult(
                    success=False,
                    message="Invalid JSON structure",
                    error=str(e),
                )

        try:
            for program_name, program in document.programs.items():
                await self._import_program(document, program_name, program)
        except ImportAborted as e:
            return ImportResult(
                success=False,
                message=str(e),
                error=e.error.describe(),
            )
        except Exception as e:
            logger.exception(f"Import failed: {e}")
            return ImportResult(
                success=False,
                message="Import failed",
                error=str(e),
            )

        s = self.stats
        return ImportResult(
            success=True,
            message=(
                f"Successfully imported {s.programs} programs with {s.days} days, "
                f"{s.sections} sections, {s.components} components, and {s.exercises} exercises"
            ),
            stats=s,
        )

    async def _import_program(self, document: WorkoutDocument, name: str, program: ProgramEntry) -> None:
        logger.info(f"Importing program: {name}")
        week = document.week_info
        row = {
            "name": name,
            "full_name": program.full_name or name,
            "week_title": week.week_title if week else None,
            "start_date": week.start_date if week else None,
            "end_date": week.end_date if week else None,
        }

        ok, existing = self._attempt("program", f"look up program: {name}",
                                     lambda: self.store.find_program_by_name(name))
        if not ok:
            return
        if existing:
            ok, record = self._attempt("program", f"update program: {name}",
                                       lambda: self.store.update_program(existing["id"], row))
        else:
            ok, record = self._attempt("program", f"insert program: {name}",
                                       lambda: self.store.insert_program(row))
        if not ok:
            return
        self.stats.programs += 1

        for day_name, day in program.days.items():
            await self._import_day(record["id"], name, day_name, day)

    async def _import_day(self, program_id: str, program_name: str, day_name: str, day: DayEntry) -> None:
        logger.info(f"  Importing day: {day_name}")
        row = {
            "program_id": program_id,
            "day_name": day_name,
            "date": day.date,
            "day_title": day.day_title,
            "coach_notes": day.coach_notes,
        }

        ok, existing = self._attempt("day", f"look up day {day_name} of {program_name}",
                                     lambda: self.store.find_day(program_id, day_name))
        if not ok:
            return
        if existing:
            ok, record = self._attempt("day", f"update day {day_name} of {program_name}",
                                       lambda: self.store.update_day(existing["id"], row))
        else:
            ok, record = self._attempt("day", f"insert day {day_name} of {program_name}",
                                       lambda: self.store.insert_day(row))
        if not ok:
            return
        self.stats.days += 1

        day_id = record["id"]
        ok, _ = self._attempt("day", f"clear sections of day {day_name} of {program_name}",
                              lambda: self.store.delete_day_children(day_id))
        if not ok:
            return

        for index, section in enumerate(day.sections):
            await self._import_section(day_id, index, section)

    async def _import_section(self, day_id: str, index: int, section: SectionEntry) -> None:
        fmt = section.format
        row = {
            "day_id": day_id,
            "section_type": section.section_type,
            "section_letter": section.section_letter,
            "order_index": index,
            "duration": section.duration,
            "format_type": fmt.type if fmt else None,
            "format_structure": fmt.structure if fmt else None,
            "format_interval_seconds": fmt.interval_seconds if fmt else None,
            "format_total_sets": fmt.total_sets if fmt else None,
        }
        ok, record = self._attempt("section", f"insert section {section.section_type!r}",
                                   lambda: self.store.insert_section(row))
        if not ok:
            return
        self.stats.sections += 1

        for component_index, component in enumerate(section.import_components()):
            await self._import_component(record["id"], component_index, component)

    async def _import_component(self, section_id: str, index: int, component: ComponentEntry) -> None:
        row = {
            "section_id": section_id,
            "component_type": component.type,
            "order_index": index,
            "rounds": component.rounds,
            "transition": component.transition,
            "loading_note": component.loading_note,
            "progression_note": component.progression_note,
            "intention_note": component.intention_note,
        }
        ok, record = self._attempt("component", f"insert {component.type or 'untyped'} component",
                                   lambda: self.store.insert_component(row))
        if not ok:
            return
        self.stats.components += 1

        for order_index, exercise in component.resolved_exercises():
            await self._import_exercise(record["id"], order_index, exercise)

    async def _import_exercise(self, component_id: str, order_index: int, exercise: ExerciseEntry) -> None:
        row = build_exercise_row(component_id, order_index, exercise)
        ok, _ = self._attempt("exercise", f"insert exercise {exercise.name!r}",
                              lambda: self.store.insert_exercise(row))
        if ok:
            self.stats.exercises += 1


def build_exercise_row(component_id: str, order_index: int, exercise: ExerciseEntry) -> Dict[str, Any]:
    """Map an exercise entry to an ``exercises`` row."""
    working = exercise.working_set()
    return {
        "component_id": component_id,
        "name": exercise.name,
        "order_index": order_index,
        "sets_reps": exercise.display_sets_reps(),
        "tempo": exercise.tempo or (working.tempo if working else None),
        "rpe": exercise.rpe or (working.rpe if working else None),
        "duration": exercise.duration,
        "rest_after": exercise.rest_after,
        "track_weight": exercise.track_weight,
        "alternatives": exercise.alternatives,
        "loading_note": exercise.loading_note,
        "progression_note": exercise.progression_note,
        "notes": exercise.notes,
        "set_type": working.set_type if working else None,
        "set_number": working.set_number if working else None,
        "set_range": working.set_range if working else None,
    }


async def import_workout_data(
    store: WorkoutStore,
    data: Any,
    error_policy: Optional[Mapping[str, ErrorPolicy]] = None,
) -> ImportResult:
    """Import a workout plan with a fresh WorkoutImporter."""
    return await WorkoutImporter(store, error_policy).import_workout_data(data)


# ============================================================================
# Connectivity probe
# ============================================================================

async def probe_database_connection(store: WorkoutStore) -> ImportResult:
    """
    Check credentials and schema before a real import.

    Reads one program, inserts a throwaway program and deletes it again.
    """
    logger.info("Testing database connection...")
    try:
        existing = store.list_programs(limit=1)
    except WorkoutStoreError as e:
        logger.error(f"Read test failed: {e.describe()}")
        return ImportResult(
            success=False,
            message="Cannot read from programs table",
            error=e.describe(),
        )

    test_program = {
        "name": f"TEST_PROGRAM_{int(time.time() * 1000)}",
        "full_name": "Test Program",
        "week_title": "Test Week",
        "start_date": "2025-01-01",
        "end_date": "2025-01-07",
    }
    try:
        inserted = store.insert_program(test_program)
    except WorkoutStoreError as e:
        logger.error(f"Insert test failed: {e.describe()}")
        return ImportResult(
            success=False,
            message="Cannot insert test program",
            error=e.describe(),
        )

    try:
        store.delete_program(inserted["id"])
    except WorkoutStoreError as e:
        logger.error(f"Cleanup of {test_program['name']} failed: {e.describe()}")
        return ImportResult(
            success=False,
            message=f"Cannot delete test program {test_program['name']}",
            error=e.describe(),
        )

    return ImportResult(
        success=True,
        message=(
            "Database connection and schema test successful! "
            f"Found {len(existing)} existing programs."
        ),
    )


# ============================================================================
# Bulk delete
# ============================================================================

async def clear_all_workout_data(store: WorkoutStore, confirmation: Optional[str]) -> ClearResult:
    """
    Delete every workout row, children first.

    Refuses to touch the backend unless ``confirmation`` is exactly
    CLEAR_CONFIRMATION_PHRASE. Stops at the first failing table.
    """
    if confirmation != CLEAR_CONFIRMATION_PHRASE:
        logger.warning("Refusing to clear workout data: confirmation phrase did not match")
        return ClearResult(
            success=False,
            confirmed=False,
            message=f'Type "{CLEAR_CONFIRMATION_PHRASE}" to confirm deleting all workout data',
        )

    cleared: List[str] = []
    for table in CLEAR_ORDER:
        try:
            store.clear_table(table)
        except WorkoutStoreError as e:
            logger.error(f"Error clearing {table}: {e.describe()}")
            return ClearResult(
                success=False,
                message=f"Failed to clear {table}",
                cleared_tables=cleared,
                error=e.describe(),
            )
        cleared.append(table)

    logger.warning("All workout data cleared")
    return ClearResult(
        success=True,
        message="All workout data cleared",
        cleared_tables=cleared,
    )
