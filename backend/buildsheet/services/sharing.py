"""
Sharing and import/export of projects.

The export document is the session document itself, pretty-printed, with an
``_exportMetadata`` block. Import is deliberately lenient (the document may
have been hand-edited) but all-or-nothing: it either produces a brand new
project or changes nothing.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from buildsheet import config
from buildsheet.models.drafting_schema import DraftingSession, ProjectIndexEntry, short_id, utcnow
from buildsheet.services import activity_log
from buildsheet.services.project_store import ProjectStore

logger = logging.getLogger("buildsheet-sharing")


@dataclass
class ShareResult:
    success: bool
    message: str
    slug: Optional[str] = None
    conflict: bool = False


def normalize_slug(raw: str) -> str:
    slug = (raw or "").strip().lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-{2,}", "-", slug)
    return slug.strip("-")


class SharingService:
    def __init__(self, store: ProjectStore):
        self.store = store

    def reserve_slug(self, raw: str) -> ShareResult:
        slug = normalize_slug(raw)
        if len(slug) < config.SLUG_MIN_LENGTH:
            return ShareResult(False, f"Slug must be at least {config.SLUG_MIN_LENGTH} characters.")

        session = self.store.session
        for entry in self.store.list_projects():
            if entry.share_slug == slug and entry.id != session.id:
                logger.info(f"Slug {slug!r} already held by project {entry.id}")
                return ShareResult(False, f"The link '{slug}' is already taken by another project.", conflict=True)

        session.share_slug = slug
        session.touch()
        self.store.save()
        return ShareResult(True, f"Project is shared as '{slug}'.", slug)

    def find_project_by_slug(self, slug: str) -> Optional[ProjectIndexEntry]:
        slug = normalize_slug(slug)
        session = self.store.session
        if session.share_slug == slug:
            return ProjectIndexEntry.from_session(session)
        return next((e for e in self.store.list_projects() if e.share_slug == slug), None)

    def export_project(self, project_id: str) -> Optional[str]:
        session = self.store.get_stored(project_id)
        if session is None:
            return None
        document = session.to_document()
        document["_exportMetadata"] = {
            "version": config.EXPORT_FORMAT_VERSION,
            "exportedAt": utcnow().isoformat(),
        }
        return json.dumps(document, indent=2)

    def import_project(self, document_text: str) -> Optional[str]:
        """Returns the new project id, or None when the document is rejected."""
        try:
            data = json.loads(document_text)
        except (TypeError, ValueError) as e:
            logger.warning(f"Import rejected: not JSON ({e})")
            return None

        if not isinstance(data, dict):
            logger.warning("Import rejected: document is not an object")
            return None
        if not isinstance(data.get("messages"), list) or not isinstance(data.get("bom"), list):
            logger.warning("Import rejected: 'messages' and 'bom' must both be arrays")
            return None

        data = dict(data)
        data.pop("_exportMetadata", None)
        was_dirty = data.pop("cacheIsDirty", data.pop("cache_is_dirty", True))
        has_fingerprint = bool(data.get("cacheFingerprint") or data.get("cache_fingerprint"))
        if not str(data.get("name") or "").strip():
            data["name"] = config.IMPORTED_PROJECT_NAME
        for key in ("id", "slug", "shareSlug", "share_slug", "ownerId", "owner_id"):
            data.pop(key, None)

        try:
            session = DraftingSession.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Import rejected: {e.error_count()} validation error(s)")
            return None

        session.id = short_id()
        session.owner_id = self.store.owner_id
        session.share_slug = None
        session.slug = f"{normalize_slug(session.name) or 'imported'}-{session.id[:4]}"

        if not has_fingerprint:
            has_artifacts = bool(session.cached_audit_result or session.cached_assembly_plan)
            session.cache_fingerprint = (
                session.bom_fingerprint() if has_artifacts and was_dirty is False else None
            )

        session.touch()
        self.store.activate(session)
        self.store.activity.log(activity_log.PROJECT_IMPORTED, {"id": session.id, "name": session.name})
        logger.info("Imported project", extra={"project_id": session.id})
        return session.id
