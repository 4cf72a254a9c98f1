"""
conftest.py — Shared pytest fixtures for the BuildSheet backend test suite.

Every fixture runs against ``MemoryStorage``; no database file, network or
LLM provider is touched. The assistant is replaced by ``FakeAssistantClient``,
which replays scripted replies and records what it was asked.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``buildsheet.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import os
import sys

import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any buildsheet imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# Catalog / storage / engine
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def catalog():
    """The seed hardware registry (read-only, shared across the session)."""
    from buildsheet.services.catalog import Catalog
    return Catalog()


@pytest.fixture
def storage():
    """Unlimited in-memory storage."""
    from buildsheet.services.storage import MemoryStorage
    return MemoryStorage()


@pytest.fixture
def store(storage):
    from buildsheet.services.project_store import ProjectStore
    return ProjectStore(storage, owner_id="tester")


@pytest.fixture
def engine(store, catalog):
    """Fresh DraftingEngine over a fresh store — one per test."""
    from buildsheet.services.drafting_engine import DraftingEngine
    return DraftingEngine(store, catalog)


@pytest.fixture(autouse=True)
def _reset_persistence_tracker():
    from buildsheet.services.perf_monitor import tracker
    tracker.reset()
    yield
    tracker.reset()


# ---------------------------------------------------------------------------
# Scripted assistant
# ---------------------------------------------------------------------------

class FakeAssistantClient:
    """
    Stand-in for AssistantClient. ``replies`` are consumed in order by ask();
    an Exception instance in the list is raised instead of returned.
    """

    def __init__(self, replies=None):
        from buildsheet.services.command_parser import CommandParser
        self.parser = CommandParser()
        self.replies = list(replies or [])
        self.asked = []
        self.audit_text = "## Audit\nStatus: OK"
        self.audit_error = None
        self.plan = None
        self.sources = []
        self.local = []
        self.image_url = None
        self.brief = "# Brief\nMachined 6061 aluminium."
        self.calls = []

    async def ask(self, prompt, history, image=None):
        self.asked.append((prompt, [m.content for m in history], image))
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def verify(self, bom, requirements, previous_audit=None):
        self.calls.append("verify")
        if self.audit_error:
            raise self.audit_error
        return self.parser.parse(self.audit_text)

    async def plan_assembly(self, bom, previous_plan=None):
        self.calls.append("plan_assembly")
        return self.plan

    async def find_sources(self, query):
        self.calls.append(f"find_sources:{query}")
        return self.sources

    async def find_local_suppliers(self, query):
        self.calls.append(f"find_local_suppliers:{query}")
        return self.local

    async def generate_image(self, description, reference_image=None):
        self.calls.append("generate_image")
        return self.image_url

    async def generate_fabrication_brief(self, part_name, context):
        self.calls.append(f"brief:{part_name}")
        return self.brief


@pytest.fixture
def fake_client():
    return FakeAssistantClient()


@pytest.fixture
def assistant(engine, fake_client):
    """DesignAssistant wired to the scripted client; auto-render disabled."""
    from buildsheet.services.design_assistant import DesignAssistant
    return DesignAssistant(engine, fake_client, visualize_on_change=False)


@pytest.fixture
def sample_plan():
    from buildsheet.models.drafting_schema import AssemblyPlan
    return AssemblyPlan.model_validate({
        "steps": [
            {"stepNumber": 1, "description": "Seat PCB in case", "requiredTool": "2-Finger", "estimatedTime": "30s"},
            {"stepNumber": 2, "description": "Press switches", "requiredTool": "Vacuum", "estimatedTime": "4m"},
        ],
        "totalTime": "5m",
        "difficulty": "Medium",
        "requiredEndEffectors": ["2-Finger", "Vacuum"],
        "automationFeasibility": 82,
        "notes": "Switch insertion needs force feedback.",
    })
