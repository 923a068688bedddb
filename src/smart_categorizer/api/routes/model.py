import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from smart_categorizer.api.dependencies import get_engine
from smart_categorizer.api.schemas import ModelReloadRequest
from smart_categorizer.core import settings
from smart_categorizer.engine import CategorizationEngine
from smart_categorizer.errors import ModelLoadError
from smart_categorizer.logger import get_logger
from smart_categorizer.models import EngineStats

logger = get_logger(__name__)

router = APIRouter()


@router.get("/stats", response_model=EngineStats)
async def get_stats(
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> EngineStats:
    return engine.stats()


@router.post("/model/reload", response_model=EngineStats)
async def reload_model(
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
    req: ModelReloadRequest | None = None,
) -> EngineStats:
    path = (req.path if req else None) or settings.get_settings().model_path
    try:
        await asyncio.to_thread(engine.reload_model, path)
    except ModelLoadError as e:
        logger.error("[MODEL] Reload from %s rejected: %s", path, e)
        raise HTTPException(status_code=409, detail=str(e)) from e
    return engine.stats()
