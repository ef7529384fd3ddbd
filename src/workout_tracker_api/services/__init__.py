"""Workout plan import services."""
from .workout_importer import (
    CLEAR_CONFIRMATION_PHRASE,
    ErrorPolicy,
    ImportResult,
    WorkoutImporter,
    clear_all_workout_data,
    import_workout_data,
    probe_database_connection,
)
from .workout_validator import ValidationResult, validate_workout_json

__all__ = [
    "CLEAR_CONFIRMATION_PHRASE",
    "ErrorPolicy",
    "ImportResult",
    "ValidationResult",
    "WorkoutImporter",
    "clear_all_workout_data",
    "import_workout_data",
    "probe_database_connection",
    "validate_workout_json",
]
