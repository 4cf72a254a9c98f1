"""System instructions and prompt builders for the design assistant."""
import json
from typing import Iterable, List, Optional

from buildsheet.models.drafting_schema import AssemblyPlan, BOMEntry, Part


def registry_digest(parts: Iterable[Part]) -> str:
    lines = [f'- ID: "{p.id}" | Name: "{p.name}" | Cat: "{p.category}"' for p in parts]
    return "\n".join(lines) if lines else "Registry offline"


def architect_instruction(parts: Iterable[Part]) -> str:
    return f"""ROLE: You are the Senior Hardware Architect at BuildSheet.

CORE DIRECTIVE:
You manipulate the drafting board with commands. Do not just describe a build in
text: call `initializeDraft` and `addPart` so the Bill of Materials is actually created.

BEHAVIOR:
1. START: when the user asks to build something new, call `initializeDraft(name, requirements)` first.
2. SOURCING: prefer parts from the LOCAL REGISTRY below. When it has nothing suitable,
   invent a descriptive kebab-case part id (e.g. `gpu-nvidia-rtx4090`, `servo-mg996r-metal`);
   the system creates a placeholder for it. Never answer that parts cannot be found.
3. COMPATIBILITY: respect declared ports on registry parts. For invented parts assume
   standard industry interfaces.
4. CLARIFICATION: ask questions only when the request is genuinely vague.
5. OUTPUT: a brief reasoning summary, then the commands.

COMMANDS:
- initializeDraft("name", "requirements")
- addPart("part-id", quantity)
- removePart("instance-id")

---
LOCAL REGISTRY (use these ids when they match):
{registry_digest(parts)}
---

EXAMPLE:
User: "I need a flashlight."
Reasoning: the registry has a C8 host, an emitter and a driver. I will use those.
initializeDraft("C8 LED Torch", "High lumens")
addPart("flashlight-body", 1)
addPart("led-emitter", 1)
addPart("led-driver-ic", 1)
addPart("batt-18650", 1)
"""


def bom_digest(bom: List[BOMEntry], with_ports: bool = False) -> str:
    lines = []
    for e in bom:
        if with_ports:
            ports = json.dumps([p.model_dump(mode="json") for p in e.part.ports])
            lines.append(f"[ID: {e.instance_id}] {e.quantity}x {e.part.name} ({e.part.sku}) - Ports: {ports}")
        else:
            lines.append(f"{e.quantity}x {e.part.name} ({e.part.category})")
    return "\n".join(lines)


def audit_prompt(bom: List[BOMEntry], requirements: str, previous_audit: Optional[str] = None) -> str:
    previous = f"\nPREVIOUS AUDIT (revise it, do not start over):\n{previous_audit}\n" if previous_audit else ""
    return f"""PERFORM A DEEP TECHNICAL AUDIT ON THIS HARDWARE SYSTEM.

DESIGN GOALS: {requirements or "not stated"}

BILL OF MATERIALS:
{bom_digest(bom, with_ports=True)}
{previous}
TASK:
1. Identify voltage mismatches, connector mismatches and missing parts.
2. AUTO-CORRECT: for every incompatible part output `removePart("instance_id")` AND
   `addPart("replacement_part_id", qty)` with a valid replacement.

OUTPUT FORMAT:
A Markdown report (Action Taken, Status) followed by any necessary commands.
"""


def assembly_prompt(bom: List[BOMEntry], previous_plan: Optional[AssemblyPlan] = None) -> str:
    previous = ""
    if previous_plan is not None:
        previous = f"\nPREVIOUS PLAN (update it for the current BOM):\n{previous_plan.model_dump_json(by_alias=True)}\n"
    return f"""TASK: Create a robotic automated assembly plan for this Bill of Materials.

BOM:
{bom_digest(bom)}
{previous}
REQUIREMENTS:
1. Identify collision points and difficult manipulations.
2. Determine the end-effector (gripper) types required.
3. Give a step-by-step sequence for a 6-DOF industrial robot arm.
4. Estimate difficulty (Easy, Medium, Hard, Expert) and automation feasibility (0-100).

RETURN JSON ONLY, shaped as:
{{"steps": [{{"stepNumber": 1, "description": "", "requiredTool": "", "estimatedTime": ""}}],
 "totalTime": "", "difficulty": "", "requiredEndEffectors": [], "automationFeasibility": 0, "notes": ""}}
"""


def sourcing_prompt(query: str) -> str:
    return (
        f"Find purchase options for: {query}. Return a JSON array only, each item "
        '{"title": "", "url": "", "source": "merchant name", "price": "price with currency symbol"}.'
    )


def local_supplier_prompt(query: str) -> str:
    return (
        f"Find local electronics or hardware stores that might sell: {query}. Focus on physical "
        'retail locations. Return a JSON array only, each item {"name": "", "address": "", "url": ""}.'
    )


def fabrication_prompt(part_name: str, context: str) -> str:
    return f"""GENERATE A MANUFACTURING SPECIFICATION BRIEF for a custom component.

COMPONENT: {part_name}
CONTEXT: {context}

You are a Manufacturing Engineer. Infer the likely physical properties of this part
(materials, dimensions, tolerances, process) from its context.

OUTPUT FORMAT: Markdown. Be specific and technical.
"""


def concept_image_prompt(description: str) -> str:
    return f"Generate a high-quality product design concept sketch for: {description}"


def blueprint_image_prompt(part_name: str, context: str) -> str:
    return (
        f"Technical engineering blueprint diagram of {part_name}. Context: {context}. "
        "Classic blueprint style: white lines on dark blue paper. Orthographic projection with dimension lines."
    )
