"""
Drafting document schema.

Every model here serializes with the camelCase field names used by the
persisted project documents and the export format, while Python code uses
snake_case attributes. Documents are tolerant on input (hand-edited exports
must still load) and strict on invariants the engine relies on
(quantity >= 1, price >= 0).
"""
import hashlib
import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from buildsheet import config

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(v: datetime) -> datetime:
    # Hand-edited documents may carry naive timestamps
    return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


def short_id() -> str:
    return uuid.uuid4().hex[:9]


class PortType(str, Enum):
    MECHANICAL = "MECHANICAL"
    ELECTRICAL = "ELECTRICAL"
    DATA = "DATA"
    FLUID = "FLUID"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    NEUTRAL = "NEUTRAL"


class Port(BaseModel):
    """A typed, gendered physical interface declared on a part."""
    model_config = _CAMEL

    id: str
    name: str
    type: PortType
    gender: Gender
    spec: str = Field(..., description="Opaque connector-family token, e.g. 'mx-socket', 'usb-c'")


class Part(BaseModel):
    model_config = _CAMEL

    id: str = Field(..., description="Catalog key, or the assistant's kebab-case id for virtual parts")
    sku: str
    name: str
    category: str = ""
    brand: str = ""
    price: float = Field(0.0, ge=0)
    description: str = ""
    ports: List[Port] = Field(default_factory=list)
    is_virtual: bool = False


# ── Sourcing ─────────────────────────────────────────────────────────────────

class ShoppingOption(BaseModel):
    model_config = _CAMEL

    title: str = ""
    url: str = ""
    source: str = ""                # merchant name
    price: Optional[str] = None     # as quoted, currency symbol included


class LocalSupplier(BaseModel):
    model_config = _CAMEL

    name: str
    address: str = ""
    url: str = ""


class PartSourcing(BaseModel):
    """None on a list means the lookup never ran; [] means it ran and found nothing."""
    model_config = _CAMEL

    online: Optional[List[ShoppingOption]] = None
    local: Optional[List[LocalSupplier]] = None
    checked_at: datetime = Field(default_factory=utcnow)


class BOMEntry(BaseModel):
    model_config = _CAMEL

    instance_id: str
    part: Part
    quantity: int = Field(1, ge=1)
    parent_instance_id: Optional[str] = None
    is_compatible: bool = True
    warnings: List[str] = Field(default_factory=list)
    sourcing: Optional[PartSourcing] = None
    fabrication_brief: Optional[str] = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _floor_quantity(cls, v):
        # Hand-edited documents may carry 0 or negative quantities
        try:
            return max(1, int(v))
        except (TypeError, ValueError):
            return 1


# ── Transcript & media ────────────────────────────────────────────────────────

class ChatMessage(BaseModel):
    model_config = _CAMEL

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=utcnow)
    is_error: bool = False


class GeneratedImage(BaseModel):
    model_config = _CAMEL

    id: str = Field(default_factory=short_id)
    url: str = Field(..., description="Base64 data URL")
    prompt: str = ""
    timestamp: datetime = Field(default_factory=utcnow)


# ── AI-derived artifacts ──────────────────────────────────────────────────────

class AssemblyStep(BaseModel):
    model_config = _CAMEL

    step_number: int = 0
    description: str = ""
    required_tool: Optional[str] = None
    estimated_time: Optional[str] = None


class AssemblyPlan(BaseModel):
    """Robotic assembly plan returned by the assistant's structured-output call."""
    model_config = _CAMEL

    steps: List[AssemblyStep] = Field(default_factory=list)
    total_time: Optional[str] = None
    difficulty: Optional[str] = None            # Easy | Medium | Hard | Expert
    required_end_effectors: List[str] = Field(default_factory=list)
    automation_feasibility: Optional[int] = None  # 0–100 %
    notes: Optional[str] = None

    @field_validator("automation_feasibility", mode="before")
    @classmethod
    def _clamp_feasibility(cls, v):
        if v is None:
            return None
        try:
            return min(100, max(0, int(round(float(v)))))
        except (TypeError, ValueError):
            return None


# ── Aggregate root ────────────────────────────────────────────────────────────

class DraftingSession(BaseModel):
    """
    The persisted project aggregate.

    ``cache_is_dirty`` is derived, never stored as truth: the cached
    audit/plan records the BOM fingerprint it was computed against, and the
    cache is dirty whenever the live fingerprint differs. ``bom_revision`` is
    bumped by every BOM mutation, so even a mutation that leaves the entry
    list byte-identical (a quantity clamped back to 1, a pivot on an empty
    BOM) still invalidates.
    """
    model_config = _CAMEL

    id: str = Field(default_factory=short_id)
    slug: str = ""
    share_slug: Optional[str] = None
    owner_id: str = config.OWNER_ID
    name: str = config.DEFAULT_PROJECT_NAME
    design_requirements: str = ""
    bom: List[BOMEntry] = Field(default_factory=list)
    generated_images: List[GeneratedImage] = Field(default_factory=list)
    messages: List[ChatMessage] = Field(default_factory=list)
    cached_audit_result: Optional[str] = None
    cached_assembly_plan: Optional[AssemblyPlan] = None
    cache_fingerprint: Optional[str] = None
    bom_revision: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    last_modified: datetime = Field(default_factory=utcnow)

    @field_validator("created_at", "last_modified", mode="after")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return _aware(v)

    @classmethod
    def blank(cls, owner_id: str, name: str = config.DEFAULT_PROJECT_NAME) -> "DraftingSession":
        """Fresh empty session; an empty BOM counts as already audited."""
        session = cls(owner_id=owner_id, name=name)
        session.slug = f"new-build-{session.id[:4]}"
        session.cache_fingerprint = session.bom_fingerprint()
        return session

    def bom_fingerprint(self) -> str:
        payload = {
            "revision": self.bom_revision,
            "bom": [[e.instance_id, e.part.id, e.quantity] for e in self.bom],
        }
        return hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()

    @computed_field(alias="cacheIsDirty")
    @property
    def cache_is_dirty(self) -> bool:
        return self.cache_fingerprint != self.bom_fingerprint()

    def touch(self) -> None:
        self.last_modified = utcnow()

    def mark_bom_changed(self) -> None:
        self.bom_revision += 1
        self.touch()

    def find_entry(self, instance_id: str) -> Optional[BOMEntry]:
        return next((e for e in self.bom if e.instance_id == instance_id), None)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_document(), indent=indent)


class ProjectIndexEntry(BaseModel):
    """Lightweight projection kept in the index so the picker never loads full sessions."""
    model_config = _CAMEL

    id: str
    name: str
    share_slug: Optional[str] = None
    last_modified: datetime
    preview: str = ""

    @field_validator("last_modified", mode="after")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return _aware(v)

    @classmethod
    def from_session(cls, session: DraftingSession) -> "ProjectIndexEntry":
        count = len(session.bom)
        return cls(
            id=session.id,
            name=session.name,
            share_slug=session.share_slug,
            last_modified=session.last_modified,
            preview=f"{count} component{'' if count == 1 else 's'}",
        )
