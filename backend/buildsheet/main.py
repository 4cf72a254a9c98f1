"""
BuildSheet API v1.0
FastAPI backend for the hardware BOM drafting engine: local document store
(SQLite via SQLAlchemy), litellm-routed design assistant (Gemini primary,
Groq fallback).
"""
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from buildsheet import __version__, config  # noqa: E402
from buildsheet.api.assistant_routes import router as assistant_router  # noqa: E402
from buildsheet.api.bom_routes import router as bom_router  # noqa: E402
from buildsheet.api.project_routes import router as project_router  # noqa: E402
from buildsheet.db import build_engine  # noqa: E402
from buildsheet.services.catalog import Catalog  # noqa: E402
from buildsheet.services.design_assistant import DesignAssistant  # noqa: E402
from buildsheet.services.drafting_engine import DraftingEngine  # noqa: E402
from buildsheet.services.llm_client import AssistantClient  # noqa: E402
from buildsheet.services.logging_config import setup_logging  # noqa: E402
from buildsheet.services.middleware import RequestTimingMiddleware  # noqa: E402
from buildsheet.services.perf_monitor import tracker as persistence_tracker  # noqa: E402
from buildsheet.services.project_store import ProjectStore  # noqa: E402
from buildsheet.services.storage import SqlStorage  # noqa: E402

setup_logging(level=config.LOG_LEVEL, json_output=config.LOG_FORMAT.lower() != "text")
logger = logging.getLogger("buildsheet-api")

_PROCESS_START = time.monotonic()


def build_default_engine() -> DraftingEngine:
    storage = SqlStorage(build_engine(config.DATABASE_URL), capacity_bytes=config.STORAGE_QUOTA_BYTES)
    store = ProjectStore(storage, owner_id=config.OWNER_ID)
    return DraftingEngine(store, Catalog())


def create_app(
    engine: Optional[DraftingEngine] = None,
    assistant: Optional[DesignAssistant] = None,
) -> FastAPI:
    """
    Application factory. Tests pass a pre-built engine (usually over
    MemoryStorage) and a scripted assistant; production builds both from
    config on startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.engine is None:
            app.state.engine = build_default_engine()
            logger.info(f"Document store ready ({config.DATABASE_URL})")
        if app.state.assistant is None:
            app.state.assistant = DesignAssistant(app.state.engine, AssistantClient(app.state.engine.catalog))
        yield

    app = FastAPI(
        title="BuildSheet Drafting API",
        version=__version__,
        description="Natural-language hardware BOM drafting with port-compatibility checks",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.assistant = assistant

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Requested-With"],
    )
    # Request timing + X-Request-ID must be outermost so it wraps all other middleware
    app.add_middleware(RequestTimingMiddleware)

    app.include_router(project_router)
    app.include_router(bom_router)
    app.include_router(assistant_router)

    @app.get("/health")
    async def health_check():
        engine = app.state.engine
        return {
            "status": "active",
            "version": __version__,
            "uptime_seconds": round(time.monotonic() - _PROCESS_START, 1),
            "active_project": engine.session.id if engine else None,
            "llm_primary": config.LLM_PRIMARY_MODEL,
            "persistence": persistence_tracker.get_metrics(),
        }

    return app


app = create_app()
