"""Tests for the HTTP routes."""

import json

from fastapi.testclient import TestClient

from workout_tracker_api.api.dependencies import get_workout_store
from workout_tracker_api.db import EXERCISES, PROGRAM_DAYS, WorkoutStoreError
from workout_tracker_api.main import create_app
from workout_tracker_api.services.workout_importer import CLEAR_CONFIRMATION_PHRASE


def _import(client, document):
    response = client.post("/admin/import", json=document)
    assert response.status_code == 200, response.text
    return response.json()


class TestAdminRoutes:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_validate_returns_camel_case_report(self, client, sample_week):
        response = client.post("/admin/validate", json=sample_week)

        assert response.status_code == 200
        data = response.json()
        assert data["isValid"] is True
        assert data["summary"]["totalExercises"] == 5
        assert data["warnings"] == ['Day "Wednesday" in "Strength" missing sections array']

    def test_validate_invalid_document(self, client):
        data = client.post("/admin/validate", json={}).json()
        assert data["isValid"] is False
        assert data["errors"] == ["JSON must be an array with at least one object"]

    def test_import(self, client, fake_store, sample_week):
        data = _import(client, sample_week)

        assert data["success"] is True
        assert data["stats"] == {"programs": 1, "days": 2, "sections": 2, "components": 4, "exercises": 5}
        assert len(fake_store.rows(EXERCISES)) == 5

    def test_import_rejects_invalid_document(self, client, fake_store):
        response = client.post("/admin/import", json=[{"source_file": "x"}])

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["message"] == "JSON structure validation failed"
        assert detail["errors"] == ["Missing required field: programs"]
        assert fake_store.calls == []

    def test_import_program_failure(self, client, fake_store, sample_week):
        fake_store.fail("insert_program")

        data = client.post("/admin/import", json=sample_week).json()

        assert data["success"] is False
        assert data["stats"] is None
        assert data["error"].startswith("insert_program failed - Code: 23502")

    def test_oversized_document_is_rejected(self, fake_store, sample_week, monkeypatch):
        from workout_tracker_api.config import settings
        monkeypatch.setattr(settings, "MAX_JSON_NODES", 10)
        client = TestClient(create_app(store=fake_store))

        response = client.post("/admin/validate", json=sample_week)

        assert response.status_code == 413

    def test_oversized_body_is_rejected_before_parsing(self, fake_store, sample_week, monkeypatch):
        from workout_tracker_api.config import settings
        monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 64)
        client = TestClient(create_app(store=fake_store))

        response = client.post("/admin/import", json=sample_week)

        assert response.status_code == 413
        assert "File is too large" in response.json()["detail"]
        assert fake_store.calls == []

    def test_suspicious_body_is_rejected(self, client, fake_store):
        for path in ("/admin/validate", "/admin/import"):
            response = client.post(path, json=[{"source_file": "x", "programs": {}, "notes": "eval(1)"}])

            assert response.status_code == 400
            assert response.json()["detail"] == "File contains suspicious content (eval call)"
        assert fake_store.calls == []

    def test_malformed_body_is_rejected(self, client):
        response = client.post(
            "/admin/validate", content=b"[{", headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Failed to parse JSON")

    def test_test_connection(self, client):
        data = client.post("/admin/test-connection").json()
        assert data["success"] is True
        assert data["message"].endswith("Found 0 existing programs.")

    def test_clear_requires_phrase(self, client, fake_store):
        response = client.post("/admin/clear", json={"confirmation": "yes"})

        assert response.status_code == 400
        assert fake_store.calls == []

    def test_clear(self, client, fake_store, sample_week):
        _import(client, sample_week)

        response = client.post("/admin/clear", json={"confirmation": CLEAR_CONFIRMATION_PHRASE})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert all(rows == [] for rows in fake_store.tables.values())


class TestImportSessionRoutes:
    def _upload(self, client, document, filename="week1.json"):
        return client.post(
            "/admin/sessions",
            files={"file": (filename, json.dumps(document).encode("utf-8"), "application/json")},
        )

    def test_upload_validate_and_import(self, client, fake_store, sample_week):
        session = self._upload(client, sample_week).json()
        assert session["status"] == "idle"
        assert session["validation"]["summary"]["totalExercises"] == 5

        imported = client.post(f"/admin/sessions/{session['id']}/import").json()

        assert imported["status"] == "success"
        assert imported["result"]["stats"]["exercises"] == 5
        assert client.get(f"/admin/sessions/{session['id']}").json()["status"] == "success"

    def test_invalid_upload_cannot_be_imported(self, client, fake_store):
        session = self._upload(client, [{"source_file": "x"}]).json()
        assert session["status"] == "error"

        response = client.post(f"/admin/sessions/{session['id']}/import")

        assert response.status_code == 409
        assert fake_store.calls == []

    def test_suspicious_upload(self, client):
        session = self._upload(client, [{"notes": "<script>alert(1)</script>"}]).json()
        assert session["status"] == "error"
        assert "suspicious content" in session["error_message"]

    def test_unknown_session(self, client):
        assert client.get("/admin/sessions/missing").status_code == 404
        assert client.post("/admin/sessions/missing/import").status_code == 404


class TestWorkoutRoutes:
    def test_programs(self, client, sample_week):
        _import(client, sample_week)

        programs = client.get("/programs").json()

        assert [p["name"] for p in programs] == ["Strength"]
        assert programs[0]["full_name"] == "Strength Program"

    def test_day_workout(self, client, sample_week):
        _import(client, sample_week)

        day = client.get("/programs/Strength/days/Monday").json()

        assert day["day_name"] == "Monday"
        assert [s["section_type"] for s in day["workout_sections"]] == ["Warm-up", "Main"]

    def test_rest_day_is_null(self, client, sample_week):
        _import(client, sample_week)
        response = client.get("/programs/Strength/days/Sunday")
        assert response.status_code == 200
        assert response.json() is None

    def test_unknown_program(self, client):
        assert client.get("/programs/Nope/days/Monday").status_code == 404
        assert client.get("/programs/Nope/days/Monday/progress").status_code == 404

    def test_workout_for_date(self, client, sample_week):
        _import(client, sample_week)
        day = client.get("/programs/Strength/workout", params={"on": "2025-01-13"}).json()
        assert day["day_name"] == "Monday"

    def test_logging_flow(self, client, fake_store, sample_week):
        _import(client, sample_week)
        day_id = next(d["id"] for d in fake_store.rows(PROGRAM_DAYS) if d["day_name"] == "Monday")
        ids = {e["name"]: e["id"] for e in fake_store.rows(EXERCISES)}

        toggled = client.post(f"/exercises/{ids['Bike']}/toggle").json()
        assert toggled["completed"] is True

        logged = client.put(
            f"/exercises/{ids['Back Squat']}/log",
            json={"completed": True, "weight": 100, "reps": 8, "notes": "felt good"},
        ).json()
        assert logged["weight"] == 100
        assert logged["notes"] == "felt good"

        previous = client.get(f"/exercises/{ids['Back Squat']}/previous-log").json()
        assert previous["id"] == logged["id"]
        assert client.get(f"/exercises/{ids['RDL']}/previous-log").json() is None

        logs = client.get(f"/days/{day_id}/logs").json()
        assert set(logs) == {ids["Bike"], ids["Back Squat"]}

        progress = client.get("/programs/Strength/days/Monday/progress").json()
        assert progress["completed_exercises"] == 2
        assert progress["completion_percentage"] == 40

        assert client.get(f"/days/{day_id}/completion").json() == {"day_id": day_id, "completed": False}
        completed = client.post(f"/days/{day_id}/complete").json()
        assert completed["newly_completed"] == 3
        assert client.get(f"/days/{day_id}/completion").json()["completed"] is True

    def test_rest_day_progress_is_empty(self, client, sample_week):
        _import(client, sample_week)
        progress = client.get("/programs/Strength/days/Sunday/progress").json()
        assert progress["total_exercises"] == 0


class TestErrorHandling:
    def test_storage_not_configured(self, sample_week):
        app = create_app(store=None)
        app.state.workout_store = None
        client = TestClient(app)

        response = client.post("/admin/import", json=sample_week)

        assert response.status_code == 503
        # Validation does not need storage
        assert client.post("/admin/validate", json=sample_week).status_code == 200

    def test_backend_error_maps_to_502(self, fake_store):
        fake_store.fail("list_programs")
        app = create_app(store=fake_store)
        app.dependency_overrides[get_workout_store] = lambda: fake_store
        client = TestClient(app)

        response = client.get("/programs")

        assert response.status_code == 502
        assert response.json()["detail"] == (
            "list_programs failed - Code: 23502 - Details: simulated failure - Hint: check the test setup"
        )

    def test_store_error_describe_matches_handler(self):
        error = WorkoutStoreError("boom", code="PGRST116")
        assert error.describe() == "boom - Code: PGRST116 - Details: N/A - Hint: N/A"
