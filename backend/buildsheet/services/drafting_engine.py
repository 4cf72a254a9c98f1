"""
Drafting Engine — the single entry point the API and the assistant
orchestration talk to.

One instance per process, constructed with its store (and therefore its
storage backend) injected. It composes the BOM engine, the artifact cache
and the sharing service over the same store, and adds the transcript, image
and sourcing operations that do not count as BOM mutations.
"""
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from buildsheet.models.commands import AddPart, InitDraft, RemovePart
from buildsheet.models.drafting_schema import (
    AssemblyPlan,
    BOMEntry,
    ChatMessage,
    DraftingSession,
    GeneratedImage,
    LocalSupplier,
    Part,
    PartSourcing,
    ProjectIndexEntry,
    ShoppingOption,
)
from buildsheet.services import activity_log
from buildsheet.services.artifact_cache import ArtifactCache
from buildsheet.services.bom_engine import BOMEngine
from buildsheet.services.catalog import Catalog
from buildsheet.services.project_store import ProjectStore
from buildsheet.services.sharing import ShareResult, SharingService

logger = logging.getLogger("buildsheet-engine")

_PRICE_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def parse_price(text: Optional[str]) -> Optional[float]:
    """'$1,299.99' → 1299.99; None when no number is present."""
    if not text:
        return None
    m = _PRICE_RE.search(str(text))
    if not m:
        return None
    try:
        return float(m.group(0).replace(",", ""))
    except ValueError:
        return None


@dataclass
class CommandResult:
    command: str
    success: bool
    message: str
    instance_id: Optional[str] = None


class DraftingEngine:
    def __init__(self, store: ProjectStore, catalog: Optional[Catalog] = None):
        self.store = store
        self.catalog = catalog or Catalog()
        self.bom = BOMEngine(store, self.catalog)
        self.cache = ArtifactCache(store)
        self.sharing = SharingService(store)

    @property
    def session(self) -> DraftingSession:
        return self.store.session

    @property
    def activity(self) -> activity_log.ActivityLog:
        return self.store.activity

    def snapshot(self) -> DraftingSession:
        return self.store.snapshot()

    # ── BOM ──────────────────────────────────────────────────────────────────

    def add_part(self, part_id: str, qty: int = 1) -> BOMEntry:
        return self.bom.add_part(part_id, qty)

    def remove_part(self, instance_id: str) -> Optional[BOMEntry]:
        return self.bom.remove_part(instance_id)

    def update_quantity(self, instance_id: str, qty: int) -> Optional[BOMEntry]:
        return self.bom.update_quantity(instance_id, qty)

    def initialize(self, name: str, requirements: str = "") -> None:
        self.bom.initialize(name, requirements)

    def get_total_cost(self) -> float:
        return self.bom.get_total_cost()

    def search_catalog(self, query: str = "") -> List[Part]:
        return self.bom.search_catalog(query)

    def apply_commands(self, commands: Iterable) -> List[CommandResult]:
        """Apply parsed commands strictly in order."""
        results = []
        for cmd in commands:
            try:
                if isinstance(cmd, InitDraft):
                    self.initialize(cmd.name, cmd.requirements)
                    results.append(CommandResult(cmd.kind, True, f"Initialized: {cmd.name}"))
                elif isinstance(cmd, AddPart):
                    entry = self.add_part(cmd.part_id, cmd.qty)
                    verb = "Drafted" if entry.part.is_virtual else "Added"
                    results.append(CommandResult(cmd.kind, True, f"{verb}: {entry.part.name}", entry.instance_id))
                elif isinstance(cmd, RemovePart):
                    removed = self.remove_part(cmd.instance_id)
                    if removed is None:
                        results.append(CommandResult(cmd.kind, False, f"Not in BOM: {cmd.instance_id}", cmd.instance_id))
                    else:
                        results.append(CommandResult(cmd.kind, True, f"Removed: {removed.part.name}", cmd.instance_id))
                else:
                    logger.warning(f"Ignoring unknown command {cmd!r}")
            except Exception as e:
                logger.error(f"Command {cmd!r} failed: {type(e).__name__}: {e}", exc_info=True)
                results.append(CommandResult(getattr(cmd, "kind", "unknown"), False, str(e)))
        return results

    # ── Artifact cache ───────────────────────────────────────────────────────

    def cache_audit(self, text: str) -> None:
        self.cache.cache_audit(text)

    def cache_assembly_plan(self, plan: AssemblyPlan) -> None:
        self.cache.cache_assembly_plan(plan)

    # ── Transcript, images, sourcing (not BOM mutations) ─────────────────────

    def add_message(self, role: str, content: str, is_error: bool = False) -> ChatMessage:
        message = ChatMessage(role=role, content=content, is_error=is_error)
        self.session.messages.append(message)
        self.session.touch()
        self.store.save()
        return message

    def add_generated_image(self, url: str, prompt: str = "") -> GeneratedImage:
        image = GeneratedImage(url=url, prompt=prompt)
        self.session.generated_images.append(image)
        self.session.touch()
        self.store.save()
        self.activity.log(activity_log.IMAGE_GENERATED, {"id": image.id, "prompt": prompt})
        return image

    def update_part_sourcing(
        self,
        instance_id: str,
        online: Optional[List[ShoppingOption]],
        local: Optional[List[LocalSupplier]],
    ) -> Optional[BOMEntry]:
        entry = self.session.find_entry(instance_id)
        if entry is None:
            return None
        entry.sourcing = PartSourcing(online=list(online or []), local=list(local or []))

        # Placeholder prices pick up the cheapest quoted offer
        if entry.part.price == 0 and online:
            prices = [p for p in (parse_price(o.price) for o in online) if p is not None and p > 0]
            if prices:
                entry.part.price = min(prices)
                logger.info(f"Adopted market price {entry.part.price} for {entry.part.id}")

        self.session.touch()
        self.store.save()
        return entry

    def set_fabrication_brief(self, instance_id: str, brief: str) -> Optional[BOMEntry]:
        entry = self.session.find_entry(instance_id)
        if entry is None:
            return None
        entry.fabrication_brief = brief
        self.session.touch()
        self.store.save()
        return entry

    def get_sourcing_completion(self) -> int:
        bom = self.session.bom
        if not bom:
            return 100
        done = sum(1 for e in bom if e.sourcing is not None and e.sourcing.online is not None)
        return round(done * 100 / len(bom))

    # ── Projects & sharing ───────────────────────────────────────────────────

    def create_new_project(self, name: Optional[str] = None) -> DraftingSession:
        return self.store.create_new_project(name)

    def load_project(self, project_id: str) -> bool:
        return self.store.load_project(project_id)

    def rename_project(self, project_id: str, name: str) -> bool:
        return self.store.rename_project(project_id, name)

    def delete_project(self, project_id: str) -> bool:
        return self.store.delete_project(project_id)

    def list_projects(self) -> List[ProjectIndexEntry]:
        return self.store.list_projects()

    def reserve_slug(self, raw: str) -> ShareResult:
        return self.sharing.reserve_slug(raw)

    def find_project_by_slug(self, slug: str) -> Optional[ProjectIndexEntry]:
        return self.sharing.find_project_by_slug(slug)

    def export_project(self, project_id: Optional[str] = None) -> Optional[str]:
        return self.sharing.export_project(project_id or self.session.id)

    def import_project(self, document_text: str) -> Optional[str]:
        return self.sharing.import_project(document_text)
