import logging
from typing import Dict, Iterable, List, Optional

from buildsheet.data.seed_catalog import HARDWARE_REGISTRY
from buildsheet.models.drafting_schema import Part

logger = logging.getLogger("buildsheet-catalog")


class Catalog:
    """
    Read-only lookup over the hardware registry.

    Parts are handed out as deep copies so a BOM entry can never mutate the
    registry row it was resolved from.
    """

    def __init__(self, parts: Optional[Iterable[Part]] = None):
        self._parts: Dict[str, Part] = {}
        for part in (HARDWARE_REGISTRY if parts is None else parts):
            if part.id in self._parts:
                logger.warning(f"Duplicate catalog id {part.id!r} — keeping first definition")
                continue
            self._parts[part.id] = part

    def __len__(self) -> int:
        return len(self._parts)

    def __contains__(self, part_id: str) -> bool:
        return part_id in self._parts

    def get(self, part_id: str) -> Optional[Part]:
        part = self._parts.get(part_id)
        return part.model_copy(deep=True) if part else None

    def search(self, query: str = "") -> List[Part]:
        """Case-insensitive substring match over name, category and sku."""
        q = (query or "").strip().lower()
        if not q:
            return [p.model_copy(deep=True) for p in self._parts.values()]
        return [
            p.model_copy(deep=True)
            for p in self._parts.values()
            if q in p.name.lower() or q in p.category.lower() or q in p.sku.lower()
        ]

    def ids(self) -> List[str]:
        return list(self._parts)
