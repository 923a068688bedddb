import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from smart_categorizer.api.dependencies import get_engine
from smart_categorizer.api.schemas import RulesPayload
from smart_categorizer.engine import CategorizationEngine
from smart_categorizer.errors import RuleCompileError
from smart_categorizer.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/rules", response_model=RulesPayload)
async def get_rules(
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> RulesPayload:
    return RulesPayload(rules=engine.user_rules)


@router.put("/rules", response_model=RulesPayload)
async def replace_rules(
    payload: RulesPayload,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> RulesPayload:
    try:
        rules = await asyncio.to_thread(engine.update_rules, payload.rules)
    except RuleCompileError as e:
        logger.warning("[RULES] Rejected rule update: %s", e)
        raise HTTPException(status_code=422, detail=str(e)) from e
    return RulesPayload(rules=rules)
