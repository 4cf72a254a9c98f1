"""
Design Assistant — one conversational turn and the AI artifact pipeline.

Commands are derived only after the assistant's full reply has arrived, so a
cancelled turn applies nothing. External-service failures never propagate to
the caller; they end up as an inline ``[ERROR]`` message in the transcript and
the user retries by resubmitting.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from buildsheet.models.drafting_schema import AssemblyPlan, BOMEntry, ChatMessage
from buildsheet.services.command_parser import CommandParser
from buildsheet.services.drafting_engine import CommandResult, DraftingEngine
from buildsheet.services.llm_client import AssistantClient

logger = logging.getLogger("buildsheet-assistant")


@dataclass
class TurnResult:
    reply: ChatMessage
    results: List[CommandResult] = field(default_factory=list)
    error: Optional[str] = None


class DesignAssistant:
    def __init__(
        self,
        engine: DraftingEngine,
        client: AssistantClient,
        parser: Optional[CommandParser] = None,
        visualize_on_change: bool = True,
    ):
        self.engine = engine
        self.client = client
        self.parser = parser or CommandParser()
        self.visualize_on_change = visualize_on_change
        self.last_audit_corrections = 0

    @property
    def session(self):
        return self.engine.session

    def _error(self, text: str) -> ChatMessage:
        return self.engine.add_message("assistant", f"[ERROR] {text}", is_error=True)

    # ── Chat ─────────────────────────────────────────────────────────────────

    async def send_message(self, text: str, image: Optional[str] = None) -> TurnResult:
        history = list(self.session.messages)
        self.engine.add_message("user", text)

        try:
            raw = await self.client.ask(text, history, image)
        except Exception as e:
            logger.warning(f"Assistant call failed: {type(e).__name__}: {e}")
            return TurnResult(self._error(str(e)), error=str(e))

        parsed = self.parser.parse(raw)
        results = self.engine.apply_commands(parsed.commands)
        reply = self.engine.add_message("assistant", parsed.reasoning or raw)

        if self.visualize_on_change and any(r.success for r in results):
            await self.generate_visual()
        return TurnResult(reply, results)

    # ── Cached artifacts ─────────────────────────────────────────────────────

    async def run_audit(self, force: bool = False) -> Optional[str]:
        session = self.session
        self.last_audit_corrections = 0
        if not session.bom:
            return None
        if not force and not session.cache_is_dirty and session.cached_audit_result:
            return session.cached_audit_result

        try:
            parsed = await self.client.verify(
                list(session.bom), session.design_requirements, session.cached_audit_result,
            )
        except Exception as e:
            logger.warning(f"Audit failed: {e}")
            self._error(f"Audit failed: {e}")
            return session.cached_audit_result

        results = self.engine.apply_commands(parsed.commands)
        self.last_audit_corrections = sum(1 for r in results if r.success)
        self.engine.cache_audit(parsed.reasoning)
        return parsed.reasoning

    async def plan_assembly(self, force: bool = False) -> Optional[AssemblyPlan]:
        session = self.session
        if not session.bom:
            return None
        if not force and not session.cache_is_dirty and session.cached_assembly_plan:
            return session.cached_assembly_plan

        try:
            plan = await self.client.plan_assembly(list(session.bom), session.cached_assembly_plan)
        except Exception as e:
            logger.warning(f"Assembly planning failed: {e}")
            plan = None
        if plan is None:
            return session.cached_assembly_plan
        self.engine.cache_assembly_plan(plan)
        return plan

    # ── Sourcing, visuals, briefs ────────────────────────────────────────────

    async def source_part(self, instance_id: str) -> Optional[BOMEntry]:
        entry = self.session.find_entry(instance_id)
        if entry is None:
            return None
        query = entry.part.name
        try:
            online = await self.client.find_sources(query)
            local = await self.client.find_local_suppliers(query)
        except Exception as e:
            logger.warning(f"Sourcing failed for {query!r}: {e}")
            online, local = [], []
        return self.engine.update_part_sourcing(instance_id, online or [], local or [])

    async def source_all(self) -> int:
        pending = [
            e.instance_id for e in self.session.bom
            if e.sourcing is None or e.sourcing.online is None
        ]
        for instance_id in pending:
            await self.source_part(instance_id)
        return len(pending)

    async def generate_visual(self) -> Optional[str]:
        session = self.session
        if not session.bom:
            return None
        requirements = session.design_requirements or session.name or "Hardware assembly"
        try:
            url = await self.client.generate_image(requirements)
        except Exception as e:
            logger.warning(f"Concept render failed: {e}")
            return None
        if not url:
            return None
        self.engine.add_generated_image(url, f"Design concept for: {requirements}")
        return url

    async def generate_fabrication_brief(self, instance_id: str) -> Optional[str]:
        entry = self.session.find_entry(instance_id)
        if entry is None:
            return None
        context = self.session.design_requirements or self.session.name
        try:
            brief = await self.client.generate_fabrication_brief(entry.part.name, context)
        except Exception as e:
            logger.warning(f"Fabrication brief failed for {entry.part.id}: {e}")
            self._error(f"Fabrication brief failed: {e}")
            return None
        self.engine.set_fabrication_brief(instance_id, brief)
        return brief

    # ── One-click kit ────────────────────────────────────────────────────────

    def kit_ready(self) -> bool:
        session = self.session
        return bool(
            session.bom
            and self.engine.get_sourcing_completion() == 100
            and not session.cache_is_dirty
            and session.cached_audit_result
            and session.cached_assembly_plan
        )

    async def stabilize_kit(self) -> bool:
        """Source, audit, plan and render whatever is missing. True when the kit is ready."""
        if not self.session.bom:
            return False
        if self.kit_ready():
            return True

        def say(text):
            self.engine.add_message("assistant", text)

        say("**One-Click Stabilization Initiated.** Finding vendors, synchronizing pricing and running a technical audit.")
        try:
            await self.source_all()
            say("**Pricing synchronized.** Market data applied to all components.")

            say("**Technical Audit in progress.** Evaluating system integrity...")
            await self.run_audit()
            if self.last_audit_corrections:
                await self.source_all()

            say("**Planning Assembly.** Sequencing robotic assembly steps...")
            await self.plan_assembly(force=self.last_audit_corrections > 0)

            if not self.session.generated_images:
                await self.generate_visual()
            say("**Kit Stabilized.** Your manifest is ready for checkout.")
        except Exception as e:
            logger.error(f"Kit stabilization error: {e}", exc_info=True)
            say("**Stabilization Warning.** Some processes failed to complete. Please review the BOM manually.")
            return False
        return self.kit_ready()
