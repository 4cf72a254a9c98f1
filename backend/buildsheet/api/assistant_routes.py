"""Assistant API routes — chat turn and the AI artifact pipeline."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from buildsheet.api.deps import get_assistant
from buildsheet.services.design_assistant import DesignAssistant

router = APIRouter(prefix="/api/assistant", tags=["Assistant"])
logger = logging.getLogger("buildsheet-api")


class ChatRequest(BaseModel):
    message: str
    image: Optional[str] = None      # data URL


class ForceRequest(BaseModel):
    force: bool = False


@router.post("/chat")
async def chat(body: ChatRequest, assistant: DesignAssistant = Depends(get_assistant)):
    if not body.message.strip():
        raise HTTPException(status_code=422, detail="Message is empty")
    turn = await assistant.send_message(body.message, body.image)
    return {
        "reply": turn.reply.model_dump(mode="json", by_alias=True),
        "results": [{"command": r.command, "success": r.success, "message": r.message} for r in turn.results],
        "error": turn.error,
        "session": assistant.engine.snapshot().to_document(),
    }


@router.post("/audit")
async def audit(body: ForceRequest = ForceRequest(), assistant: DesignAssistant = Depends(get_assistant)):
    result = await assistant.run_audit(force=body.force)
    return {"auditResult": result, "cacheIsDirty": assistant.session.cache_is_dirty}


@router.post("/assembly-plan")
async def assembly_plan(body: ForceRequest = ForceRequest(), assistant: DesignAssistant = Depends(get_assistant)):
    plan = await assistant.plan_assembly(force=body.force)
    return {
        "assemblyPlan": plan.model_dump(mode="json", by_alias=True) if plan else None,
        "cacheIsDirty": assistant.session.cache_is_dirty,
    }


@router.post("/sourcing")
async def source_all(assistant: DesignAssistant = Depends(get_assistant)):
    sourced = await assistant.source_all()
    return {"sourced": sourced, "sourcingCompletion": assistant.engine.get_sourcing_completion()}


@router.post("/sourcing/{instance_id}")
async def source_part(instance_id: str, assistant: DesignAssistant = Depends(get_assistant)):
    entry = await assistant.source_part(instance_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No BOM entry {instance_id}")
    return entry.model_dump(mode="json", by_alias=True)


@router.post("/visual")
async def visual(assistant: DesignAssistant = Depends(get_assistant)):
    url = await assistant.generate_visual()
    return {"generated": url is not None, "url": url}


@router.post("/fabrication-brief/{instance_id}")
async def fabrication_brief(instance_id: str, assistant: DesignAssistant = Depends(get_assistant)):
    if assistant.session.find_entry(instance_id) is None:
        raise HTTPException(status_code=404, detail=f"No BOM entry {instance_id}")
    brief = await assistant.generate_fabrication_brief(instance_id)
    return {"fabricationBrief": brief}


@router.post("/stabilize")
async def stabilize(assistant: DesignAssistant = Depends(get_assistant)):
    ready = await assistant.stabilize_kit()
    return {"kitReady": ready, "session": assistant.engine.snapshot().to_document()}
