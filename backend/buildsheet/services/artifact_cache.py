"""
Artifact Cache — the last audit report and assembly plan.

Staleness is derived rather than tracked: storing an artifact records the
BOM fingerprint it was computed against, and the cache is dirty whenever the
live fingerprint no longer matches. A dirty artifact is still returned;
callers show it with a "refresh needed" marker.
"""
from typing import Optional

from buildsheet.models.drafting_schema import AssemblyPlan, DraftingSession
from buildsheet.services.project_store import ProjectStore


class ArtifactCache:
    def __init__(self, store: ProjectStore):
        self.store = store

    @property
    def session(self) -> DraftingSession:
        return self.store.session

    @property
    def is_dirty(self) -> bool:
        return self.session.cache_is_dirty

    @property
    def audit(self) -> Optional[str]:
        return self.session.cached_audit_result

    @property
    def assembly_plan(self) -> Optional[AssemblyPlan]:
        return self.session.cached_assembly_plan

    def _mark_fresh(self) -> None:
        self.session.cache_fingerprint = self.session.bom_fingerprint()
        self.session.touch()
        self.store.save()

    def cache_audit(self, text: str) -> None:
        self.session.cached_audit_result = text
        self._mark_fresh()

    def cache_assembly_plan(self, plan: AssemblyPlan) -> None:
        self.session.cached_assembly_plan = plan
        self._mark_fresh()

    def status(self) -> dict:
        plan = self.assembly_plan
        return {
            "auditResult": self.audit,
            "assemblyPlan": plan.model_dump(mode="json", by_alias=True) if plan else None,
            "cacheIsDirty": self.is_dirty,
        }
