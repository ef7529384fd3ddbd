"""
Workout JSON Validator

Checks an uploaded workout plan before anything is written:
- top-level shape (non-empty array, first element with source_file/programs)
- every program carries a days mapping
- every day carries a sections array (warning only)

and summarises what an import would write. Works on the raw JSON so it can
report on documents that would not decode; never touches the backend.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

REQUIRED_TOP_LEVEL_FIELDS = ("source_file", "programs")


class CamelModel(BaseModel):
    """Serialises field names as camelCase for the admin UI."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class WeekInfoSummary(CamelModel):
    title: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class ValidationSummary(CamelModel):
    total_programs: Optional[int] = None
    program_names: Optional[List[str]] = None
    total_days: Optional[int] = None
    total_sections: Optional[int] = None
    total_components: Optional[int] = None
    total_exercises: Optional[int] = None
    week_info: Optional[WeekInfoSummary] = None
    source_file: Optional[str] = None


class ValidationResult(CamelModel):
    """Outcome of validating an import document."""
    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    summary: ValidationSummary = Field(default_factory=ValidationSummary)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.is_valid = False


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _count_objects(value: Any) -> int:
    """Number of object entries in a JSON array; the importer skips the rest."""
    if not isinstance(value, list):
        return 0
    return sum(1 for item in value if isinstance(item, dict))


def _count_component_exercises(component: Dict[str, Any]) -> int:
    count = 1 if isinstance(component.get("exercise"), dict) else 0
    return count + _count_objects(component.get("exercises"))


def _count_section(section: Dict[str, Any], totals: Dict[str, int]) -> None:
    """Add one section's components and exercises to the running totals.

    Shape is detected per section: a nested section contributes its
    components' exercises, a flat one its own exercises array.
    """
    components = section.get("components")
    if isinstance(components, list):
        for component in components:
            if not isinstance(component, dict):
                continue
            totals["components"] += 1
            totals["exercises"] += _count_component_exercises(component)

    totals["exercises"] += _count_objects(section.get("exercises"))


def validate_workout_json(data: Any) -> ValidationResult:
    """
    Validate an import document and summarise its contents.

    Args:
        data: Parsed JSON of any shape

    Returns:
        ValidationResult with errors, warnings and summary counts
    """
    result = ValidationResult()

    if not isinstance(data, list) or len(data) == 0:
        result.add_error("JSON must be an array with at least one object")
        return result

    week = data[0]
    if not isinstance(week, dict):
        result.add_error("First element of the JSON array must be an object")
        return result

    for field in REQUIRED_TOP_LEVEL_FIELDS:
        if _is_missing(week.get(field)):
            result.add_error(f"Missing required field: {field}")

    programs = week.get("programs")
    if programs is not None and not isinstance(programs, dict):
        result.add_error("Field programs must be an object keyed by program name")
    elif isinstance(programs, dict):
        totals = {"days": 0, "sections": 0, "components": 0, "exercises": 0}

        for program_name, program in programs.items():
            days = program.get("days") if isinstance(program, dict) else None
            if not isinstance(days, dict):
                result.add_error(f'Program "{program_name}" missing days object')
                continue

            totals["days"] += len(days)

            for day_name, day in days.items():
                sections = day.get("sections") if isinstance(day, dict) else None
                if not isinstance(sections, list):
                    result.warnings.append(
                        f'Day "{day_name}" in "{program_name}" missing sections array'
                    )
                    continue

                for section in sections:
                    if not isinstance(section, dict):
                        continue
                    totals["sections"] += 1
                    _count_section(section, totals)

        result.summary.total_programs = len(programs)
        result.summary.program_names = list(programs.keys())
        result.summary.total_days = totals["days"]
        result.summary.total_sections = totals["sections"]
        result.summary.total_components = totals["components"]
        result.summary.total_exercises = totals["exercises"]

    week_info = week.get("week_info")
    if isinstance(week_info, dict):
        result.summary.week_info = WeekInfoSummary(
            title=_as_text(week_info.get("week_title")),
            start_date=_as_text(week_info.get("start_date")),
            end_date=_as_text(week_info.get("end_date")),
        )

    source_file = week.get("source_file")
    if isinstance(source_file, str):
        result.summary.source_file = source_file

    if result.is_valid:
        logger.info(
            f"Validated {result.summary.source_file or 'upload'}: "
            f"{result.summary.total_programs} programs, {result.summary.total_exercises} exercises"
        )
    return result
