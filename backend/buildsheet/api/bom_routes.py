"""BOM API routes — entries, cost, catalog search, artifact status."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from buildsheet.api.deps import get_engine
from buildsheet.services.drafting_engine import DraftingEngine

router = APIRouter(prefix="/api/bom", tags=["BOM"])
logger = logging.getLogger("buildsheet-api")

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


class AddPartRequest(BaseModel):
    model_config = _CAMEL
    part_id: str
    qty: int = 1


class UpdateQuantityRequest(BaseModel):
    quantity: int


def _entry(entry):
    return entry.model_dump(mode="json", by_alias=True)


@router.get("")
async def get_bom(engine: DraftingEngine = Depends(get_engine)):
    session = engine.session
    return {
        "entries": [_entry(e) for e in session.bom],
        "totalCost": engine.get_total_cost(),
        "sourcingCompletion": engine.get_sourcing_completion(),
        "cacheIsDirty": session.cache_is_dirty,
    }


@router.post("/parts", status_code=201)
async def add_part(body: AddPartRequest, engine: DraftingEngine = Depends(get_engine)):
    return _entry(engine.add_part(body.part_id, body.qty))


@router.delete("/parts/{instance_id}")
async def remove_part(instance_id: str, engine: DraftingEngine = Depends(get_engine)):
    removed = engine.remove_part(instance_id)
    if removed is None:
        raise HTTPException(status_code=404, detail=f"No BOM entry {instance_id}")
    return _entry(removed)


@router.patch("/parts/{instance_id}")
async def update_quantity(instance_id: str, body: UpdateQuantityRequest, engine: DraftingEngine = Depends(get_engine)):
    entry = engine.update_quantity(instance_id, body.quantity)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No BOM entry {instance_id}")
    return _entry(entry)


@router.get("/total")
async def total_cost(engine: DraftingEngine = Depends(get_engine)):
    return {"totalCost": engine.get_total_cost()}


@router.get("/catalog")
async def search_catalog(q: str = Query("", description="Matches name, category or sku"),
                         engine: DraftingEngine = Depends(get_engine)):
    return [p.model_dump(mode="json", by_alias=True) for p in engine.search_catalog(q)]


@router.get("/sourcing-completion")
async def sourcing_completion(engine: DraftingEngine = Depends(get_engine)):
    return {"sourcingCompletion": engine.get_sourcing_completion()}


@router.get("/artifacts")
async def artifacts(engine: DraftingEngine = Depends(get_engine)):
    return engine.cache.status()
