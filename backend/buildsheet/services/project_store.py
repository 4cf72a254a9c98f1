"""
Session/Project Store.

Owns the single active ``DraftingSession`` plus the project index, and is the
only component that talks to the storage backend. Three kinds of document
live in storage:

    buildsheet_project_<id>     full session document (camelCase JSON)
    buildsheet_project_index    JSON array of ProjectIndexEntry, newest first
    buildsheet_active_project   id of the session to reopen on start

The store always has an active session: construction reopens the last active
project or creates a blank one, and deleting the active project falls back to
the next indexed project or a fresh one.

Reads are tolerant. A missing, corrupt or unparseable document is treated as
absent and logged; it never replaces the in-memory session.
"""
import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from buildsheet import config
from buildsheet.models.drafting_schema import DraftingSession, ProjectIndexEntry
from buildsheet.services import activity_log
from buildsheet.services.activity_log import ActivityLog
from buildsheet.services.perf_monitor import timed
from buildsheet.services.persistence import DegradingWriter, WriteOutcome
from buildsheet.services.storage import StorageBackend, StorageError

logger = logging.getLogger("buildsheet-store")


class ProjectNotFound(KeyError):
    pass


def project_key(project_id: str) -> str:
    return f"{config.PROJECT_KEY_PREFIX}{project_id}"


class ProjectStore:
    def __init__(
        self,
        storage: StorageBackend,
        owner_id: str = config.OWNER_ID,
        writer: Optional[DegradingWriter] = None,
        activity: Optional[ActivityLog] = None,
    ):
        self.storage = storage
        self.owner_id = owner_id
        self.writer = writer or DegradingWriter(storage)
        self.activity = activity or ActivityLog()
        self._session: Optional[DraftingSession] = None

        active_id = self._read_json(config.ACTIVE_PROJECT_KEY)
        restored = self._read_session(active_id) if isinstance(active_id, str) else None
        if restored is not None:
            self._session = restored
            logger.info("Restored active project", extra={"project_id": restored.id})
        else:
            self.create_new_project()

    # ── Reads ────────────────────────────────────────────────────────────────

    @property
    def session(self) -> DraftingSession:
        return self._session

    def snapshot(self) -> DraftingSession:
        return self._session.model_copy(deep=True)

    def _read_json(self, key: str):
        try:
            raw = self.storage.get(key)
        except StorageError as e:
            logger.warning(f"Could not read {key!r}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning(f"Corrupt document under {key!r}: {e}")
            return None

    def _read_session(self, project_id: str) -> Optional[DraftingSession]:
        data = self._read_json(project_key(project_id))
        if data is None:
            return None
        try:
            return DraftingSession.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Stored project {project_id} failed validation: {e.error_count()} error(s)")
            return None

    def get_stored(self, project_id: str) -> Optional[DraftingSession]:
        """Load a stored session without activating it."""
        if project_id == self._session.id:
            return self.snapshot()
        return self._read_session(project_id)

    def require(self, project_id: str) -> DraftingSession:
        session = self.get_stored(project_id)
        if session is None:
            raise ProjectNotFound(project_id)
        return session

    def list_projects(self) -> List[ProjectIndexEntry]:
        data = self._read_json(config.PROJECT_INDEX_KEY)
        if not isinstance(data, list):
            return []
        entries = []
        for item in data:
            try:
                entries.append(ProjectIndexEntry.model_validate(item))
            except ValidationError:
                logger.warning("Skipping malformed project index entry")
        return entries

    # ── Writes ───────────────────────────────────────────────────────────────

    def _write_index(self, entries: List[ProjectIndexEntry]) -> WriteOutcome:
        entries = sorted(entries, key=lambda e: e.last_modified, reverse=True)
        return self.writer.write(
            config.PROJECT_INDEX_KEY,
            [e.model_dump(mode="json", by_alias=True) for e in entries],
        )

    def _upsert_index(self, session: DraftingSession) -> None:
        entries = [e for e in self.list_projects() if e.id != session.id]
        entries.append(ProjectIndexEntry.from_session(session))
        self._write_index(entries)

    def _write_session(self, session: DraftingSession) -> WriteOutcome:
        return self.writer.write(project_key(session.id), session.to_document())

    @timed
    def save(self) -> WriteOutcome:
        """Persist the active session, refresh its index entry, mark it active."""
        session = self._session
        outcome = self._write_session(session)
        self._upsert_index(session)
        self.writer.write(config.ACTIVE_PROJECT_KEY, session.id)
        if not outcome.written:
            logger.error(
                f"Project save failed: {outcome.error}",
                extra={"project_id": session.id},
            )
        return outcome

    def activate(self, session: DraftingSession) -> WriteOutcome:
        self._session = session
        return self.save()

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def create_new_project(self, name: Optional[str] = None) -> DraftingSession:
        session = DraftingSession.blank(self.owner_id, name or config.DEFAULT_PROJECT_NAME)
        self.activate(session)
        self.activity.log(activity_log.PROJECT_CREATED, {"id": session.id, "name": session.name})
        logger.info("Created project", extra={"project_id": session.id})
        return session

    def load_project(self, project_id: str) -> bool:
        if project_id == self._session.id:
            return True
        session = self._read_session(project_id)
        if session is None:
            logger.warning(f"Cannot load project {project_id}: not found or unreadable")
            return False
        self._session = session
        self.writer.write(config.ACTIVE_PROJECT_KEY, session.id)
        logger.info("Loaded project", extra={"project_id": session.id})
        return True

    def rename_project(self, project_id: str, name: str) -> bool:
        if project_id == self._session.id:
            self._session.name = name
            self._session.touch()
            self.save()
            return True

        session = self._read_session(project_id)
        if session is None:
            return False
        session.name = name
        session.touch()
        self._write_session(session)
        self._upsert_index(session)
        return True

    def delete_project(self, project_id: str) -> bool:
        entries = self.list_projects()
        remaining = [e for e in entries if e.id != project_id]
        existed = len(remaining) != len(entries) or project_id == self._session.id

        try:
            self.storage.remove(project_key(project_id))
        except StorageError as e:
            logger.error(f"Could not remove project {project_id}: {e}")
        self._write_index(remaining)
        self.activity.log(activity_log.PROJECT_DELETED, {"id": project_id})

        if project_id == self._session.id:
            for entry in remaining:
                fallback = self._read_session(entry.id)
                if fallback is not None:
                    self._session = fallback
                    self.writer.write(config.ACTIVE_PROJECT_KEY, fallback.id)
                    break
            else:
                self.create_new_project()
        return existed
