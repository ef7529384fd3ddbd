"""Data models for workout plans.

Two families of models live here:

- Import document models (``WorkoutDocument`` and its children) decode the
  JSON plans uploaded through the admin import. Unknown fields are ignored
  and every text field coerces loose scalars (a numeric name, RPE or tempo)
  to a string, so any document the validator accepts also decodes.
- Row models (``Program``, ``ProgramDay``, ...) mirror the Supabase tables
  the tracker reads back.
"""
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

ComponentType = Literal['single_exercise', 'single_lift', 'superset', 'circuit', 'complex']
SectionShape = Literal['nested', 'flat', 'empty']

WORKING_SET_TYPE = "working"


class WorkoutDocumentError(RuntimeError):
    """Raised when an import document cannot be decoded."""


def _to_str(value: Any) -> Optional[str]:
    """Coerce scalars to strings ("8" and 8 are the same RPE).

    Objects and arrays in a text field become None rather than failing the
    whole document.
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _to_int(value: Any) -> Optional[int]:
    """Lenient int coercion; unparseable values become None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _objects_only(value: Any) -> List[Dict[str, Any]]:
    """Keep only object entries of a JSON array; anything else becomes []."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


# ============================================================================
# Import document
# ============================================================================

class SetEntry(BaseModel):
    """One row of a structured sets breakdown (warm-up, working, back-off...)."""
    set_type: Optional[str] = None
    set_number: Optional[int] = None
    set_range: Optional[str] = Field(default=None, validation_alias=AliasChoices("set_range", "range"))
    reps: Optional[str] = None
    tempo: Optional[str] = None
    rpe: Optional[str] = None

    class Config:
        extra = "ignore"

    @field_validator("set_type", "set_range", "reps", "tempo", "rpe", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return _to_str(v)

    @field_validator("set_number", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        return _to_int(v)

    @property
    def is_working(self) -> bool:
        return (self.set_type or "").strip().lower() == WORKING_SET_TYPE

    @property
    def has_range_and_reps(self) -> bool:
        return bool(self.set_range and self.reps)

    def describe(self) -> str:
        """Format as "<range> × <reps> @<tempo> RPE<rpe>", omitting missing parts.

        The "×" only appears when both range and reps are known.
        """
        if self.has_range_and_reps:
            text = f"{self.set_range} × {self.reps}"
        else:
            text = self.set_range or self.reps or ""
        if self.tempo:
            text += f" @{self.tempo}"
        if self.rpe:
            text += f" RPE{self.rpe}"
        return text.strip()


class ExerciseEntry(BaseModel):
    """A single exercise as it appears in an import document."""
    name: Optional[str] = None
    order: Optional[int] = None
    sets_reps: Optional[str] = None
    tempo: Optional[str] = None
    rpe: Optional[str] = None
    duration: Optional[str] = None
    rest_after: Optional[str] = None
    track_weight: bool = True
    alternatives: Optional[List[str]] = None
    loading_note: Optional[str] = Field(default=None, validation_alias=AliasChoices("loading_note", "loading"))
    progression_note: Optional[str] = None
    notes: Optional[str] = None
    # Structured breakdown used instead of a plain sets_reps string
    sets: Optional[List[SetEntry]] = None

    class Config:
        extra = "ignore"

    @field_validator(
        "name", "sets_reps", "tempo", "rpe", "duration", "rest_after",
        "loading_note", "progression_note", "notes",
        mode="before",
    )
    @classmethod
    def _coerce_str(cls, v):
        return _to_str(v)

    @field_validator("order", mode="before")
    @classmethod
    def _coerce_order(cls, v):
        return _to_int(v)

    @field_validator("track_weight", mode="before")
    @classmethod
    def _default_track_weight(cls, v):
        # Only an explicit "off" value disables weight tracking
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.strip().lower() not in ("false", "no", "off", "0")
        if isinstance(v, (int, float)):
            return v != 0
        return True

    @field_validator("alternatives", mode="before")
    @classmethod
    def _coerce_alternatives(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            return [v]
        if isinstance(v, list):
            return [str(a) for a in v if a is not None]
        return None

    @field_validator("sets", mode="before")
    @classmethod
    def _coerce_sets(cls, v):
        # "sets": 3 is a plain count, not a breakdown
        if v is None or not isinstance(v, list):
            return None
        return _objects_only(v)

    def working_set(self) -> Optional[SetEntry]:
        """First set flagged as a working set, if any."""
        for entry in self.sets or []:
            if entry.is_working:
                return entry
        return None

    def display_sets_reps(self) -> Optional[str]:
        """Sets/reps string shown to the user.

        A structured breakdown wins over the literal ``sets_reps`` field when it
        contains a working set with both range and reps. An incomplete working
        set is only used when there is no literal to fall back to.
        """
        working = self.working_set()
        if working is None:
            return self.sets_reps
        if working.has_range_and_reps or not self.sets_reps:
            return working.describe() or self.sets_reps
        return self.sets_reps


class ComponentEntry(BaseModel):
    """A group of exercises sharing a training pattern (superset, circuit...)."""
    type: Optional[str] = Field(default=None, validation_alias=AliasChoices("type", "component_type"))
    rounds: Optional[int] = None
    transition: Optional[str] = None
    loading_note: Optional[str] = None
    progression_note: Optional[str] = None
    intention_note: Optional[str] = None
    exercise: Optional[ExerciseEntry] = None
    exercises: List[ExerciseEntry] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    @field_validator("exercise", mode="before")
    @classmethod
    def _single_object(cls, v):
        return v if isinstance(v, dict) else None

    @field_validator("exercises", mode="before")
    @classmethod
    def _exercise_objects(cls, v):
        return _objects_only(v)

    @field_validator("type", "transition", "loading_note", "progression_note", "intention_note", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return _to_str(v)

    @field_validator("rounds", mode="before")
    @classmethod
    def _coerce_rounds(cls, v):
        return _to_int(v)

    def resolved_exercises(self) -> List[Tuple[int, ExerciseEntry]]:
        """Return ``(order_index, exercise)`` pairs for this component.

        The embedded ``exercise`` comes first at order 0, followed by every
        entry of ``exercises``. Both contribute when both are present. An
        explicit ``order`` wins over the position in the combined list.
        """
        combined: List[ExerciseEntry] = []
        if self.exercise is not None:
            combined.append(self.exercise.model_copy(update={"order": 0}))
        combined.extend(self.exercises)
        return [
            (ex.order if ex.order is not None else position, ex)
            for position, ex in enumerate(combined)
        ]


class SectionFormat(BaseModel):
    """Timing format of a section (EMOM, AMRAP, intervals...)."""
    type: Optional[str] = None
    structure: Optional[str] = None
    interval_seconds: Optional[int] = None
    total_sets: Optional[int] = None

    class Config:
        extra = "ignore"

    @field_validator("type", "structure", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return _to_str(v)

    @field_validator("interval_seconds", "total_sets", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        return _to_int(v)


class SectionEntry(BaseModel):
    """
    A labelled phase of a day (warm-up, main work...).

    Sections come in two shapes:
    - nested: ``components`` each holding their own exercises
    - flat: ``exercises`` attached directly to the section (older plans)
    """
    section_type: Optional[str] = None
    section_letter: Optional[str] = None
    duration: Optional[str] = None
    format: Optional[SectionFormat] = None
    components: List[ComponentEntry] = Field(default_factory=list)
    exercises: List[ExerciseEntry] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    @field_validator("section_type", "section_letter", "duration", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return _to_str(v)

    @field_validator("format", mode="before")
    @classmethod
    def _format_object(cls, v):
        if isinstance(v, (str, int, float)) and not isinstance(v, bool):
            return {"type": str(v)}
        return v if isinstance(v, dict) else None

    @field_validator("components", "exercises", mode="before")
    @classmethod
    def _list_objects(cls, v):
        return _objects_only(v)

    @property
    def shape(self) -> SectionShape:
        if self.components:
            return "nested"
        if self.exercises:
            return "flat"
        return "empty"

    def import_components(self) -> List[ComponentEntry]:
        """Components to write for this section.

        Exercises attached directly to the section get one implicit
        ``single_exercise`` component each, after the section's own
        components, so every exercise row still hangs off a component.
        """
        implicit = [
            ComponentEntry(type="single_exercise", exercise=ex.model_dump())
            for ex in self.exercises
        ]
        return list(self.components) + implicit


class DayEntry(BaseModel):
    """One weekday of a program."""
    date: Optional[str] = None
    day_title: Optional[str] = None
    coach_notes: Optional[str] = None
    sections: List[SectionEntry] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    @field_validator("date", "day_title", "coach_notes", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return _to_str(v)

    @field_validator("sections", mode="before")
    @classmethod
    def _section_objects(cls, v):
        return _objects_only(v)


class ProgramEntry(BaseModel):
    """A named multi-day plan; days are keyed by weekday name."""
    full_name: Optional[str] = None
    days: Dict[str, DayEntry]

    class Config:
        extra = "ignore"

    @field_validator("full_name", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return _to_str(v)

    @field_validator("days", mode="before")
    @classmethod
    def _day_objects(cls, v):
        if not isinstance(v, dict):
            return v
        return {name: (day if isinstance(day, dict) else {}) for name, day in v.items()}


class WeekInfo(BaseModel):
    week_title: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    class Config:
        extra = "ignore"

    @field_validator("week_title", "start_date", "end_date", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return _to_str(v)


class WorkoutDocument(BaseModel):
    """The first element of an import file: one week of programs."""
    source_file: Optional[str] = None
    week_info: Optional[WeekInfo] = None
    programs: Dict[str, ProgramEntry]

    class Config:
        extra = "ignore"

    @field_validator("week_info", mode="before")
    @classmethod
    def _week_object(cls, v):
        return v if isinstance(v, dict) else None


def parse_workout_document(data: Any) -> WorkoutDocument:
    """Decode raw import JSON into a ``WorkoutDocument``.

    Only the first element of the array is imported; files carry one week.

    Raises:
        WorkoutDocumentError: if the data does not have the document shape
    """
    if not isinstance(data, list) or not data:
        raise WorkoutDocumentError("JSON must be an array with at least one object")
    week = data[0]
    if not isinstance(week, dict):
        raise WorkoutDocumentError("First element must be an object")
    if week.get("programs") is None:
        raise WorkoutDocumentError("No programs found in JSON data")
    try:
        return WorkoutDocument.model_validate(week)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(p) for p in first.get("loc", ()))
        raise WorkoutDocumentError(f"{location}: {first.get('msg')}") from e


# ============================================================================
# Backend rows
# ============================================================================

class Program(BaseModel):
    id: str
    name: str
    full_name: Optional[str] = None
    week_title: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    created_at: Optional[str] = None

    class Config:
        extra = "ignore"


class Exercise(BaseModel):
    """An exercise row as stored in the backend."""
    id: str
    component_id: Optional[str] = None
    name: str
    order_index: int = 0
    sets_reps: Optional[str] = None
    tempo: Optional[str] = None
    rpe: Optional[str] = None
    duration: Optional[str] = None
    rest_after: Optional[str] = None
    track_weight: bool = True
    alternatives: Optional[List[str]] = None
    loading_note: Optional[str] = None
    progression_note: Optional[str] = None
    notes: Optional[str] = None
    set_type: Optional[str] = None
    set_number: Optional[int] = None
    set_range: Optional[str] = None

    class Config:
        extra = "ignore"


class WorkoutComponent(BaseModel):
    id: str
    section_id: Optional[str] = None
    component_type: Optional[str] = None
    order_index: int = 0
    rounds: Optional[int] = None
    transition: Optional[str] = None
    loading_note: Optional[str] = None
    progression_note: Optional[str] = None
    intention_note: Optional[str] = None
    exercises: List[Exercise] = Field(default_factory=list)

    class Config:
        extra = "ignore"


class WorkoutSection(BaseModel):
    id: str
    day_id: Optional[str] = None
    section_type: Optional[str] = None
    section_letter: Optional[str] = None
    order_index: int = 0
    duration: Optional[str] = None
    format_type: Optional[str] = None
    format_structure: Optional[str] = None
    format_interval_seconds: Optional[int] = None
    format_total_sets: Optional[int] = None
    workout_components: List[WorkoutComponent] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    @property
    def display_name(self) -> str:
        if self.section_letter:
            return f"{self.section_letter} - {self.section_type}"
        return self.section_type or ""


class ProgramDay(BaseModel):
    """A program day with its nested workout structure."""
    id: str
    program_id: Optional[str] = None
    day_name: str
    date: Optional[str] = None
    day_title: Optional[str] = None
    coach_notes: Optional[str] = None
    workout_sections: List[WorkoutSection] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    def sort_children(self) -> "ProgramDay":
        """Order sections, components and exercises by their order_index."""
        self.workout_sections.sort(key=lambda s: s.order_index)
        for section in self.workout_sections:
            section.workout_components.sort(key=lambda c: c.order_index)
            for component in section.workout_components:
                component.exercises.sort(key=lambda e: e.order_index)
        return self


class ExerciseLog(BaseModel):
    id: str
    exercise_id: str
    weight: Optional[float] = None
    reps: Optional[int] = None
    completed: bool = False
    logged_at: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        extra = "ignore"


class WorkoutCompletion(BaseModel):
    id: str
    day_id: str
    completed_at: Optional[str] = None
    total_exercises: Optional[int] = None
    completed_exercises: Optional[int] = None
    notes: Optional[str] = None

    class Config:
        extra = "ignore"
