"""
Drafting engine configuration — single source of truth for storage keys,
quota, defaults, and LLM routing.

Import from here in all services rather than hardcoding values.
"""
from __future__ import annotations

import os

# ── Storage ───────────────────────────────────────────────────────────────────

DATABASE_URL: str = os.getenv("BUILDSHEET_DATABASE_URL", "sqlite:///buildsheet.db")

# Hard capacity ceiling for the document store, in bytes. 0 disables the limit.
STORAGE_QUOTA_BYTES: int = int(os.getenv("BUILDSHEET_STORAGE_QUOTA_BYTES", str(5 * 1024 * 1024)))

PROJECT_KEY_PREFIX: str = "buildsheet_project_"
PROJECT_INDEX_KEY: str = "buildsheet_project_index"
ACTIVE_PROJECT_KEY: str = "buildsheet_active_project"

# ── Identity ──────────────────────────────────────────────────────────────────

# Authentication lives outside the engine; this is the id stamped as ownerId.
OWNER_ID: str = os.getenv("BUILDSHEET_OWNER_ID", "anonymous")

# ── Session defaults ──────────────────────────────────────────────────────────

DEFAULT_PROJECT_NAME: str = "Untitled Assembly"
IMPORTED_PROJECT_NAME: str = "Imported Project"
SLUG_MIN_LENGTH: int = 3
EXPORT_FORMAT_VERSION: str = "1.0"
ACTIVITY_LOG_LIMIT: int = 500

# ── Virtual (inferred) parts ──────────────────────────────────────────────────

VIRTUAL_SKU_PREFIX: str = "DRAFT-"
VIRTUAL_CATEGORY: str = "Inferred Component"
VIRTUAL_BRAND: str = "Design Placeholder"
VIRTUAL_DESCRIPTION: str = "Virtual component suggested by Architect."
VIRTUAL_PENDING_WARNING: str = "Virtual component: physical validation pending."

# ── Command parser ────────────────────────────────────────────────────────────

FALLBACK_REASONING: str = "The assistant provided no output."

# ── LLM routing ───────────────────────────────────────────────────────────────

LLM_PRIMARY_MODEL: str = os.getenv("LLM_PRIMARY_MODEL", "gemini/gemini-2.0-flash")
LLM_FALLBACK_MODEL: str = os.getenv("LLM_FALLBACK_MODEL", "groq/llama-3.3-70b-versatile")
LLM_REASONING_MODEL: str = os.getenv("LLM_REASONING_MODEL", "gemini/gemini-2.5-pro")
LLM_IMAGE_MODEL: str = os.getenv("LLM_IMAGE_MODEL", "gemini/imagen-3.0-generate-002")

# Chat is allowed more creativity than structured calls so the assistant
# invents descriptive virtual part ids.
CHAT_TEMPERATURE: float = 0.7
STRUCTURED_TEMPERATURE: float = 0.1

# Upper bound on suppliers kept from a local-supplier lookup
MAX_LOCAL_SUPPLIERS: int = 5

# ── HTTP surface ──────────────────────────────────────────────────────────────

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")
CORS_ORIGINS: list[str] = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]
