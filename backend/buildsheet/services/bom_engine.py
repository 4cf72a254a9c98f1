"""
BOM Engine — mutations of the active session's entry list.

Every mutation bumps the session's BOM revision (which dirties the artifact
cache), stamps ``lastModified`` and persists through the store. Part ids the
catalog does not know are never an error: a zero-priced, port-less virtual
part is synthesized from the id instead.
"""
import logging
from typing import List, Optional

from buildsheet import config
from buildsheet.models.drafting_schema import BOMEntry, DraftingSession, Part, short_id
from buildsheet.services import activity_log, compatibility
from buildsheet.services.catalog import Catalog
from buildsheet.services.project_store import ProjectStore

logger = logging.getLogger("buildsheet-engine")


def synthesize_virtual_part(part_id: str) -> Part:
    """'pcb-mount-bracket' → 'Pcb Mount Bracket', sku 'DRAFT-PCB-MOUNT-BRACKET'."""
    words = [w for w in part_id.replace("_", "-").split("-") if w]
    name = " ".join(w.capitalize() for w in words) or part_id
    return Part(
        id=part_id,
        sku=f"{config.VIRTUAL_SKU_PREFIX}{part_id.upper()}",
        name=name,
        category=config.VIRTUAL_CATEGORY,
        brand=config.VIRTUAL_BRAND,
        price=0.0,
        description=config.VIRTUAL_DESCRIPTION,
        ports=[],
        is_virtual=True,
    )


class BOMEngine:
    def __init__(self, store: ProjectStore, catalog: Catalog):
        self.store = store
        self.catalog = catalog

    @property
    def session(self) -> DraftingSession:
        return self.store.session

    def _commit(self) -> None:
        self.session.mark_bom_changed()
        self.store.save()

    def resolve_part(self, part_id: str) -> Part:
        part = self.catalog.get(part_id)
        if part is None:
            logger.info(f"Unknown part id {part_id!r} — drafting virtual component")
            part = synthesize_virtual_part(part_id)
        return part

    def add_part(self, part_id: str, qty: int = 1) -> BOMEntry:
        existing = next((e for e in self.session.bom if e.part.id == part_id), None)
        if existing is not None:
            # update_quantity applies the floor to the merged total
            return self.update_quantity(existing.instance_id, existing.quantity + int(qty))

        qty = max(1, int(qty))

        part = self.resolve_part(part_id)
        result = compatibility.validate(part, self.session.bom)
        entry = BOMEntry(
            instance_id=short_id(),
            part=part,
            quantity=qty,
            is_compatible=result.is_compatible,
            warnings=result.warnings,
        )
        self.session.bom.append(entry)
        self._commit()

        self.store.activity.log(activity_log.PART_ADDED, {
            "part_id": part.id, "instance_id": entry.instance_id, "qty": qty,
            "virtual": part.is_virtual,
        })
        if not result.is_compatible:
            logger.warning(
                f"Added {part.id} with compatibility warnings: {result.warnings}",
                extra={"project_id": self.session.id},
            )
        return entry

    def remove_part(self, instance_id: str) -> Optional[BOMEntry]:
        removed = self.session.find_entry(instance_id)
        self.session.bom = [e for e in self.session.bom if e.instance_id != instance_id]
        self._commit()
        if removed is not None:
            self.store.activity.log(activity_log.PART_REMOVED, {
                "part_id": removed.part.id, "instance_id": instance_id,
            })
        return removed

    def update_quantity(self, instance_id: str, qty: int) -> Optional[BOMEntry]:
        entry = self.session.find_entry(instance_id)
        if entry is not None:
            entry.quantity = max(1, int(qty))
            self.store.activity.log(activity_log.QUANTITY_UPDATED, {
                "instance_id": instance_id, "qty": entry.quantity,
            })
        self._commit()
        return entry

    def initialize(self, name: str, requirements: str = "") -> None:
        """Redesign pivot: new name and requirements, empty BOM, same conversation."""
        self.session.name = name
        self.session.design_requirements = requirements
        self.session.bom = []
        self._commit()
        self.store.activity.log(activity_log.SESSION_INITIALIZED, {"name": name})

    def get_total_cost(self) -> float:
        return round(sum(e.part.price * e.quantity for e in self.session.bom), 2)

    def search_catalog(self, query: str = "") -> List[Part]:
        return self.catalog.search(query)
