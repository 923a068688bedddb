import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends

from smart_categorizer.api.dependencies import get_engine
from smart_categorizer.api.schemas import (
    BatchCategorizeRequest,
    BatchCategorizeResponse,
    CategorizeRequest,
    LearnRequest,
    LearnResponse,
)
from smart_categorizer.engine import CategorizationEngine
from smart_categorizer.models import CategorizationResult

router = APIRouter()


@router.post("/categorize", response_model=CategorizationResult)
async def categorize_transaction(
    req: CategorizeRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> CategorizationResult:
    return await asyncio.to_thread(engine.categorize, req.transaction)


@router.post("/categorize/batch", response_model=BatchCategorizeResponse)
async def categorize_batch(
    req: BatchCategorizeRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> BatchCategorizeResponse:
    results = await asyncio.to_thread(engine.categorize_batch, req.transactions)
    return BatchCategorizeResponse(results=results)


@router.post("/learn", response_model=LearnResponse)
async def learn(
    req: LearnRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> LearnResponse:
    learned = await asyncio.to_thread(engine.learn, req.transaction, req.category)
    return LearnResponse(learned=learned)
