"""Project API routes — list, lifecycle, sharing, import/export."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from buildsheet.api.deps import get_engine
from buildsheet.services.drafting_engine import DraftingEngine

router = APIRouter(prefix="/api/projects", tags=["Projects"])
logger = logging.getLogger("buildsheet-api")

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


class CreateProjectRequest(BaseModel):
    name: Optional[str] = None


class RenameProjectRequest(BaseModel):
    name: str


class ReserveSlugRequest(BaseModel):
    model_config = _CAMEL
    slug: str


@router.get("")
async def list_projects(engine: DraftingEngine = Depends(get_engine)):
    return [e.model_dump(mode="json", by_alias=True) for e in engine.list_projects()]


@router.post("", status_code=201)
async def create_project(body: CreateProjectRequest = CreateProjectRequest(), engine: DraftingEngine = Depends(get_engine)):
    session = engine.create_new_project(body.name)
    return session.to_document()


@router.get("/active")
async def active_project(engine: DraftingEngine = Depends(get_engine)):
    return engine.snapshot().to_document()


@router.post("/active/share")
async def reserve_share_slug(body: ReserveSlugRequest, engine: DraftingEngine = Depends(get_engine)):
    result = engine.reserve_slug(body.slug)
    if not result.success:
        raise HTTPException(status_code=409 if result.conflict else 422, detail=result.message)
    return {"slug": result.slug, "message": result.message}


@router.get("/share/{slug}")
async def find_by_slug(slug: str, engine: DraftingEngine = Depends(get_engine)):
    entry = engine.find_project_by_slug(slug)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No project shared as '{slug}'")
    return entry.model_dump(mode="json", by_alias=True)


@router.post("/import", status_code=201)
async def import_project(request: Request, engine: DraftingEngine = Depends(get_engine)):
    raw = (await request.body()).decode("utf-8", errors="replace")
    new_id = engine.import_project(raw)
    if new_id is None:
        raise HTTPException(status_code=422, detail="Invalid project document: 'messages' and 'bom' arrays are required")
    return {"id": new_id}


@router.post("/{project_id}/load")
async def load_project(project_id: str, engine: DraftingEngine = Depends(get_engine)):
    if not engine.load_project(project_id):
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    return engine.snapshot().to_document()


@router.patch("/{project_id}")
async def rename_project(project_id: str, body: RenameProjectRequest, engine: DraftingEngine = Depends(get_engine)):
    if not engine.rename_project(project_id, body.name):
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    return {"id": project_id, "name": body.name}


@router.delete("/{project_id}")
async def delete_project(project_id: str, engine: DraftingEngine = Depends(get_engine)):
    deleted = engine.delete_project(project_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    return {"deleted": project_id, "activeId": engine.session.id}


@router.get("/{project_id}/export")
async def export_project(project_id: str, engine: DraftingEngine = Depends(get_engine)):
    document = engine.export_project(project_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    return Response(
        content=document,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="buildsheet-manifest-{project_id}.json"'},
    )
