"""
Compatibility Validator — port-level physical connectability check.

Two ports mate when their connector-family ``spec`` tokens are equal and
their genders pair up (MALE↔FEMALE, or either side NEUTRAL). A candidate part
is accepted as soon as any one of its ports mates with any port already in
the BOM. This does not decide which specific part the candidate attaches
to, nor does it count free sockets.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from buildsheet import config
from buildsheet.models.drafting_schema import BOMEntry, Gender, Part, Port

logger = logging.getLogger("buildsheet-validator")


@dataclass
class CompatibilityResult:
    is_compatible: bool = True
    warnings: List[str] = field(default_factory=list)


def genders_compatible(a: Gender, b: Gender) -> bool:
    if a == Gender.NEUTRAL or b == Gender.NEUTRAL:
        return True
    return a != b


def mateable(a: Port, b: Port) -> bool:
    return a.spec == b.spec and genders_compatible(a.gender, b.gender)


def validate(new_part: Part, bom: Sequence[BOMEntry]) -> CompatibilityResult:
    # Ports unknown on a synthesized part: accept, but flag it
    if new_part.is_virtual:
        return CompatibilityResult(True, [config.VIRTUAL_PENDING_WARNING])

    if not bom or not new_part.ports:
        return CompatibilityResult(True, [])

    for port in new_part.ports:
        for entry in bom:
            for existing in entry.part.ports:
                if mateable(port, existing):
                    return CompatibilityResult(True, [])

    logger.debug(f"No mateable port pair for {new_part.id} against {len(bom)} entries")
    return CompatibilityResult(False, [f"Port spec mismatch for {new_part.name}."])
