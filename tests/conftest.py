"""
Test fixtures for workout-tracker-api.

Provides an in-memory workout store, a TestClient wired to it and sample
import documents, so tests run offline without Supabase.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make src/ and tests/ importable so tests can do `import workout_tracker_api...`
for p in {SRC, ROOT / "tests"}:
    p_str = str(p)
    if p_str not in sys.path:
        sys.path.insert(0, p_str)

from fakes import FakeWorkoutStore
from workout_tracker_api.main import create_app


# ---------------------------------------------------------------------------
# Store & Client
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_store() -> FakeWorkoutStore:
    """Fresh in-memory store per test."""
    return FakeWorkoutStore()


@pytest.fixture
def client(fake_store) -> TestClient:
    """Per-test FastAPI TestClient backed by ``fake_store``."""
    return TestClient(create_app(store=fake_store))


# ---------------------------------------------------------------------------
# Sample Documents
# ---------------------------------------------------------------------------


@pytest.fixture
def single_exercise_week() -> List[Dict[str, Any]]:
    """One program, one day, one section, one component, one exercise."""
    return [
        {
            "source_file": "single.pdf",
            "week_info": {"week_title": "Week 1", "start_date": "2025-01-06", "end_date": "2025-01-12"},
            "programs": {
                "Strength": {
                    "full_name": "Strength Program",
                    "days": {
                        "Monday": {
                            "day_title": "Lower",
                            "sections": [
                                {
                                    "section_type": "Main",
                                    "section_letter": "A",
                                    "components": [
                                        {
                                            "type": "single_lift",
                                            "exercise": {"name": "Back Squat", "sets_reps": "3 × 5"},
                                        }
                                    ],
                                }
                            ],
                        }
                    },
                }
            },
        }
    ]


@pytest.fixture
def sample_week() -> List[Dict[str, Any]]:
    """
    Mixed-shape week:

    - Monday: a flat warm-up (2 exercises) and a nested main section with a
      single lift (structured sets) and a two-exercise superset
    - Wednesday: no sections array
    """
    return [
        {
            "source_file": "week1.pdf",
            "week_info": {"week_title": "Week 1", "start_date": "2025-01-06", "end_date": "2025-01-12"},
            "programs": {
                "Strength": {
                    "full_name": "Strength Program",
                    "days": {
                        "Monday": {
                            "date": "2025-01-06",
                            "day_title": "Lower",
                            "coach_notes": "Keep rest short",
                            "sections": [
                                {
                                    "section_type": "Warm-up",
                                    "section_letter": "A",
                                    "exercises": [
                                        {"name": "Bike", "duration": "5 min", "track_weight": False},
                                        {"name": "Hip Airplane", "sets_reps": "2 × 5"},
                                    ],
                                },
                                {
                                    "section_type": "Main",
                                    "section_letter": "B",
                                    "format": {"type": "EMOM", "interval_seconds": 90},
                                    "components": [
                                        {
                                            "type": "single_lift",
                                            "exercise": {
                                                "name": "Back Squat",
                                                "sets": [
                                                    {"set_type": "warm-up", "range": "2", "reps": "5"},
                                                    {
                                                        "set_type": "working",
                                                        "set_number": 1,
                                                        "range": "3",
                                                        "reps": 8,
                                                        "tempo": "2011",
                                                        "rpe": 8,
                                                    },
                                                ],
                                            },
                                        },
                                        {
                                            "type": "superset",
                                            "rounds": 3,
                                            "exercises": [
                                                {"name": "RDL", "sets_reps": "3 × 10"},
                                                {"name": "Split Squat", "sets_reps": "3 × 8/side", "order": 5},
                                            ],
                                        },
                                    ],
                                },
                            ],
                        },
                        "Wednesday": {"day_title": "Rest"},
                    },
                }
            },
        }
    ]
