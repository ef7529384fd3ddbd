"""Supabase data access for the workout tracker.

``WorkoutStore`` is the only place that talks to Supabase. It is built once at
application startup and handed to the services and routes that need it.
Every call is a single PostgREST round trip; nothing is batched or wrapped in
a transaction.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from workout_tracker_api.config import Settings

logger = logging.getLogger(__name__)

# Tables, parent before child
PROGRAMS = "programs"
PROGRAM_DAYS = "program_days"
WORKOUT_SECTIONS = "workout_sections"
WORKOUT_COMPONENTS = "workout_components"
EXERCISES = "exercises"
EXERCISE_LOGS = "exercise_logs"
WORKOUT_COMPLETIONS = "workout_completions"

DAY_WORKOUT_SELECT = """
    *,
    workout_sections (
        *,
        workout_components (
            *,
            exercises (*)
        )
    )
"""

DAY_EXERCISE_IDS_SELECT = """
    id,
    workout_components!inner (
        workout_sections!inner (
            day_id
        )
    )
"""


class WorkoutStoreError(RuntimeError):
    """A backend call failed. Carries the PostgREST diagnostic fields."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint

    @classmethod
    def from_api_error(cls, error: APIError, action: str) -> "WorkoutStoreError":
        return cls(
            message=error.message or f"{action} failed",
            code=error.code,
            details=error.details,
            hint=error.hint,
        )

    def describe(self) -> str:
        """One-line diagnostic: message, code, details and hint."""
        return (
            f"{self.message or 'Unknown error'}"
            f" - Code: {self.code or 'N/A'}"
            f" - Details: {self.details or 'N/A'}"
            f" - Hint: {self.hint or 'N/A'}"
        )


def check_supabase_credentials(url: str, key: str) -> List[str]:
    """Return warnings about credentials that do not look like Supabase ones."""
    problems = []
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        problems.append(f"SUPABASE_URL is not a valid URL: {url!r}")
    elif "supabase" not in parsed.hostname and parsed.hostname not in ("localhost", "127.0.0.1"):
        problems.append("SUPABASE_URL does not appear to be a Supabase URL")
    if not key.startswith("eyJ"):
        problems.append("Supabase key does not appear to be in JWT format")
    elif len(key) < 100:
        problems.append("Supabase key appears to be too short")
    return problems


def get_supabase_client(settings: Settings) -> Optional[Client]:
    """Create a Supabase client from settings, or None when not configured."""
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        logger.warning("Supabase credentials not configured. Workout storage will be unavailable.")
        return None

    for problem in check_supabase_credentials(settings.SUPABASE_URL, settings.SUPABASE_KEY):
        logger.warning(problem)

    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None


class WorkoutStore:
    """Narrow data-access handle over the workout tables."""

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["WorkoutStore"]:
        client = get_supabase_client(settings)
        return cls(client) if client else None

    # ========================================================================
    # Helpers
    # ========================================================================

    def _execute(self, query, action: str) -> List[Dict[str, Any]]:
        try:
            result = query.execute()
        except APIError as e:
            raise WorkoutStoreError.from_api_error(e, action) from e
        except httpx.HTTPError as e:
            raise WorkoutStoreError(f"{action} failed: {e}") from e
        data = result.data if result is not None else None
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    def _first(self, query, action: str) -> Optional[Dict[str, Any]]:
        rows = self._execute(query, action)
        return rows[0] if rows else None

    def _insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        inserted = self._first(self.client.table(table).insert(row), f"Insert into {table}")
        if inserted is None:
            raise WorkoutStoreError(f"Insert into {table} returned no row")
        return inserted

    def _update(self, table: str, row_id: str, row: Dict[str, Any]) -> Dict[str, Any]:
        updated = self._first(
            self.client.table(table).update(row).eq("id", row_id),
            f"Update {table}",
        )
        if updated is None:
            raise WorkoutStoreError(f"Update {table} matched no row", details=f"id={row_id}")
        return updated

    def _ids(self, table: str, column: str, values: Iterable[str]) -> List[str]:
        values = list(values)
        if not values:
            return []
        rows = self._execute(
            self.client.table(table).select("id").in_(column, values),
            f"Select {table}",
        )
        return [r["id"] for r in rows]

    # ========================================================================
    # Programs
    # ========================================================================

    def list_programs(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Programs, newest first."""
        query = self.client.table(PROGRAMS).select("*").order("created_at", desc=True)
        if limit is not None:
            query = query.limit(limit)
        return self._execute(query, "Select programs")

    def find_program_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        return self._first(
            self.client.table(PROGRAMS).select("*").eq("name", name).limit(1),
            "Select program",
        )

    def insert_program(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(PROGRAMS, row)

    def update_program(self, program_id: str, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._update(PROGRAMS, program_id, row)

    def delete_program(self, program_id: str) -> None:
        self._execute(self.client.table(PROGRAMS).delete().eq("id", program_id), "Delete program")

    # ========================================================================
    # Days
    # ========================================================================

    def find_day(self, program_id: str, day_name: str) -> Optional[Dict[str, Any]]:
        return self._first(
            self.client.table(PROGRAM_DAYS)
            .select("*")
            .eq("program_id", program_id)
            .eq("day_name", day_name)
            .limit(1),
            "Select program day",
        )

    def insert_day(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(PROGRAM_DAYS, row)

    def update_day(self, day_id: str, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._update(PROGRAM_DAYS, day_id, row)

    def get_day_workout(self, program_id: str, day_name: str) -> Optional[Dict[str, Any]]:
        """A day with its sections, components and exercises embedded."""
        return self._first(
            self.client.table(PROGRAM_DAYS)
            .select(DAY_WORKOUT_SELECT)
            .eq("program_id", program_id)
            .eq("day_name", day_name)
            .limit(1),
            "Select day workout",
        )

    def delete_day_children(self, day_id: str) -> None:
        """Delete every section of a day together with its components and exercises."""
        section_ids = self._ids(WORKOUT_SECTIONS, "day_id", [day_id])
        component_ids = self._ids(WORKOUT_COMPONENTS, "section_id", section_ids)
        if component_ids:
            self._execute(
                self.client.table(EXERCISES).delete().in_("component_id", component_ids),
                "Delete exercises",
            )
        if section_ids:
            self._execute(
                self.client.table(WORKOUT_COMPONENTS).delete().in_("section_id", section_ids),
                "Delete workout components",
            )
        self._execute(
            self.client.table(WORKOUT_SECTIONS).delete().eq("day_id", day_id),
            "Delete workout sections",
        )

    # ========================================================================
    # Sections, components, exercises
    # ========================================================================

    def insert_section(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(WORKOUT_SECTIONS, row)

    def insert_component(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(WORKOUT_COMPONENTS, row)

    def insert_exercise(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(EXERCISES, row)

    def exercise_ids_for_day(self, day_id: str) -> List[str]:
        rows = self._execute(
            self.client.table(EXERCISES)
            .select(DAY_EXERCISE_IDS_SELECT)
            .eq("workout_components.workout_sections.day_id", day_id),
            "Select day exercises",
        )
        return [r["id"] for r in rows]

    # ========================================================================
    # Exercise logs & completions
    # ========================================================================

    def logs_for_exercises(self, exercise_ids: List[str]) -> List[Dict[str, Any]]:
        if not exercise_ids:
            return []
        return self._execute(
            self.client.table(EXERCISE_LOGS).select("*").in_("exercise_id", exercise_ids),
            "Select exercise logs",
        )

    def insert_log(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(EXERCISE_LOGS, row)

    def insert_logs(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if not rows:
            return []
        return self._execute(self.client.table(EXERCISE_LOGS).insert(rows), "Insert exercise logs")

    def update_log(self, log_id: str, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._update(EXERCISE_LOGS, log_id, row)

    def latest_weighted_log(self, exercise_id: str) -> Optional[Dict[str, Any]]:
        """Most recent log for an exercise that recorded both weight and reps."""
        return self._first(
            self.client.table(EXERCISE_LOGS)
            .select("*")
            .eq("exercise_id", exercise_id)
            .not_.is_("weight", "null")
            .not_.is_("reps", "null")
            .order("logged_at", desc=True)
            .limit(1),
            "Select previous exercise log",
        )

    def find_completion(self, day_id: str) -> Optional[Dict[str, Any]]:
        return self._first(
            self.client.table(WORKOUT_COMPLETIONS).select("*").eq("day_id", day_id).limit(1),
            "Select workout completion",
        )

    def insert_completion(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._insert(WORKOUT_COMPLETIONS, row)

    # ========================================================================
    # Maintenance
    # ========================================================================

    def clear_table(self, table: str) -> None:
        """Delete every row of a table."""
        self._execute(self.client.table(table).delete().not_.is_("id", "null"), f"Clear {table}")
