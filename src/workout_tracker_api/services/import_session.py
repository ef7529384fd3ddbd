"""
Admin import sessions.

Tracks the admin import workflow for one selected file:

    select_file:  validating -> idle | error
    run_import:   idle -> importing -> success | error

Sessions are never resumed. After an error (or a finished import) the admin
selects a file again, which starts a new session. Only the most recent
``max_sessions`` sessions are kept; older ones are forgotten along with any
document still waiting to be imported.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel

from workout_tracker_api.config import DEFAULT_MAX_IMPORT_SESSIONS
from workout_tracker_api.db import WorkoutStore
from workout_tracker_api.services.upload_guard import UploadRejected, load_workout_upload
from workout_tracker_api.services.workout_importer import ImportResult, WorkoutImporter
from workout_tracker_api.services.workout_validator import ValidationResult, validate_workout_json

logger = logging.getLogger(__name__)

ImportStatus = Literal["idle", "validating", "importing", "success", "error"]


class ImportSession(BaseModel):
    """State of one admin import"""
    id: str
    filename: Optional[str] = None
    status: ImportStatus = "idle"
    validation: Optional[ValidationResult] = None
    result: Optional[ImportResult] = None
    error_message: Optional[str] = None
    created_at: str
    updated_at: str


class ImportSessionError(RuntimeError):
    """Base class for session workflow errors."""


class ImportSessionNotFound(ImportSessionError):
    pass


class ImportNotAllowed(ImportSessionError):
    """The session is not in a state that allows importing."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ImportSessionService:
    """In-memory registry of admin import sessions."""

    def __init__(
        self,
        max_upload_bytes: Optional[int] = None,
        max_json_nodes: Optional[int] = None,
        max_sessions: int = DEFAULT_MAX_IMPORT_SESSIONS,
    ):
        self.max_upload_bytes = max_upload_bytes
        self.max_json_nodes = max_json_nodes
        self.max_sessions = max(1, max_sessions)
        self._sessions: Dict[str, ImportSession] = {}
        # Parsed documents waiting to be imported, by session id
        self._documents: Dict[str, Any] = {}

    def _set_status(self, session: ImportSession, status: ImportStatus, **kwargs) -> None:
        session.status = status
        for key, value in kwargs.items():
            setattr(session, key, value)
        session.updated_at = _now()
        logger.info(f"Import session {session.id} -> {status}")

    def _evict_oldest(self) -> None:
        # Dicts keep insertion order, so the first keys are the oldest sessions
        while len(self._sessions) > self.max_sessions:
            oldest = next(iter(self._sessions))
            del self._sessions[oldest]
            self._documents.pop(oldest, None)
            logger.info(f"Import session {oldest} dropped")

    def get_session(self, session_id: str) -> ImportSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise ImportSessionNotFound(f"Import session {session_id} not found")
        return session

    def select_file(self, filename: Optional[str], content: bytes) -> ImportSession:
        """Start a session for a newly selected file and validate it."""
        now = _now()
        session = ImportSession(
            id=str(uuid.uuid4()),
            filename=filename,
            status="validating",
            created_at=now,
            updated_at=now,
        )
        self._sessions[session.id] = session
        self._evict_oldest()

        try:
            data = load_workout_upload(
                content,
                filename=filename,
                max_bytes=self.max_upload_bytes,
                max_nodes=self.max_json_nodes,
            )
        except UploadRejected as e:
            self._set_status(session, "error", error_message=str(e))
            return session

        validation = validate_workout_json(data)
        if validation.is_valid:
            self._documents[session.id] = data
            self._set_status(session, "idle", validation=validation)
        else:
            self._set_status(
                session, "error",
                validation=validation,
                error_message="JSON structure validation failed",
            )
        return session

    async def run_import(self, session_id: str, store: WorkoutStore) -> ImportSession:
        """Import the session's validated file."""
        session = self.get_session(session_id)
        data = self._documents.get(session_id)
        if session.status != "idle" or data is None:
            raise ImportNotAllowed(
                f"Session is {session.status}; select the file again to retry"
            )

        self._set_status(session, "importing")
        try:
            result = await WorkoutImporter(store).import_workout_data(data)
        finally:
            self._documents.pop(session_id, None)

        if result.success:
            self._set_status(session, "success", result=result)
        else:
            self._set_status(session, "error", result=result,
                             error_message=result.error or result.message)
        return session
