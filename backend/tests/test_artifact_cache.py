"""
test_artifact_cache.py — Derived staleness of the cached audit and assembly plan.

Tests cover:
  - A fresh session is clean; every BOM mutation makes it dirty
  - cache_audit / cache_assembly_plan make it clean again until the next mutation
  - Mutations that leave the entry list unchanged still dirty the cache
  - Transcript, image and sourcing updates never dirty the cache
  - The dirty flag survives a round trip through storage
"""

import pytest

from buildsheet.models.drafting_schema import ShoppingOption
from buildsheet.services.project_store import ProjectStore


@pytest.fixture
def audited(engine):
    """Engine with a two-part BOM and a fresh audit."""
    engine.add_part("kb-pcb-1", 1)
    engine.add_part("kb-sw-1", 68)
    engine.cache_audit("## Audit\nAll ports mate.")
    assert engine.session.cache_is_dirty is False
    return engine


class TestDirtyInvariant:

    def test_new_session_is_clean(self, engine):
        assert engine.session.cache_is_dirty is False

    def test_add_dirties(self, audited):
        audited.add_part("kb-case-1")
        assert audited.session.cache_is_dirty is True

    def test_remove_dirties(self, audited):
        audited.remove_part(audited.session.bom[0].instance_id)
        assert audited.session.cache_is_dirty is True

    def test_update_quantity_dirties(self, audited):
        audited.update_quantity(audited.session.bom[1].instance_id, 70)
        assert audited.session.cache_is_dirty is True

    def test_initialize_dirties(self, audited):
        audited.initialize("Something else")
        assert audited.session.cache_is_dirty is True

    def test_quantity_clamped_to_same_value_still_dirties(self, audited):
        pcb = audited.session.bom[0]
        audited.update_quantity(pcb.instance_id, 0)
        assert pcb.quantity == 1
        assert audited.session.cache_is_dirty is True

    def test_initialize_on_empty_bom_dirties(self, engine):
        engine.cache_audit("Nothing to audit.")
        engine.initialize("Blank slate")
        assert engine.session.cache_is_dirty is True

    def test_remove_of_absent_instance_dirties(self, audited):
        audited.remove_part("missing00")
        assert audited.session.cache_is_dirty is True


class TestRefresh:

    def test_cache_audit_cleans(self, audited):
        audited.add_part("kb-case-1")
        audited.cache_audit("## Audit\nCase mount mismatch.")
        assert audited.session.cache_is_dirty is False
        assert audited.cache.audit == "## Audit\nCase mount mismatch."

    def test_cache_plan_cleans(self, audited, sample_plan):
        audited.add_part("kb-case-1")
        audited.cache_assembly_plan(sample_plan)
        assert audited.session.cache_is_dirty is False
        assert audited.cache.assembly_plan.automation_feasibility == 82

    def test_stale_artifact_is_still_returned(self, audited):
        audited.add_part("kb-case-1")
        status = audited.cache.status()
        assert status["cacheIsDirty"] is True
        assert status["auditResult"] == "## Audit\nAll ports mate."
        assert status["assemblyPlan"] is None


class TestNonBomUpdates:

    def test_messages_do_not_dirty(self, audited):
        audited.add_message("user", "Looks good.")
        assert audited.session.cache_is_dirty is False

    def test_images_do_not_dirty(self, audited):
        audited.add_generated_image("data:image/png;base64,AAAA", "concept")
        assert audited.session.cache_is_dirty is False

    def test_sourcing_does_not_dirty(self, audited):
        entry = audited.session.bom[0]
        audited.update_part_sourcing(entry.instance_id, [ShoppingOption(title="PCB", price="$45")], [])
        assert audited.session.cache_is_dirty is False

    def test_fabrication_brief_does_not_dirty(self, audited):
        entry = audited.session.bom[0]
        audited.set_fabrication_brief(entry.instance_id, "# Brief")
        assert audited.session.cache_is_dirty is False


class TestPersistedDirtyFlag:

    def test_dirty_flag_serialized(self, audited):
        audited.add_part("kb-case-1")
        document = audited.session.to_document()
        assert document["cacheIsDirty"] is True

    def test_reopened_session_keeps_staleness(self, audited, storage):
        audited.add_part("kb-case-1")
        reopened = ProjectStore(storage, owner_id="tester")
        assert reopened.session.id == audited.session.id
        assert reopened.session.cache_is_dirty is True

    def test_reopened_clean_session_stays_clean(self, audited, storage):
        reopened = ProjectStore(storage, owner_id="tester")
        assert reopened.session.cache_is_dirty is False
        assert reopened.session.cached_audit_result == "## Audit\nAll ports mate."
