"""FastAPI dependency injection — engine and assistant handles from app state."""
from fastapi import HTTPException, Request, status

from buildsheet.services.design_assistant import DesignAssistant
from buildsheet.services.drafting_engine import DraftingEngine


def get_engine(request: Request) -> DraftingEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Engine not initialized")
    request.state.project_id = engine.session.id
    return engine


def get_assistant(request: Request) -> DesignAssistant:
    assistant = getattr(request.app.state, "assistant", None)
    if assistant is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Assistant not configured")
    return assistant
