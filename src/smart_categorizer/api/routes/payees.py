import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from smart_categorizer.api.dependencies import get_engine
from smart_categorizer.api.schemas import PayeeImportResponse, PayeeListResponse, PayeeMapping
from smart_categorizer.engine import CategorizationEngine

router = APIRouter()


@router.get("/payees", response_model=PayeeListResponse)
async def list_payees(
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> PayeeListResponse:
    return PayeeListResponse(payees=engine.exact_match.entries())


@router.get("/payees/export", response_model=PayeeMapping)
async def export_payees(
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> PayeeMapping:
    return PayeeMapping(payees=engine.export_payees())


@router.post("/payees/import", response_model=PayeeImportResponse)
async def import_payees(
    req: PayeeMapping,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> PayeeImportResponse:
    imported = await asyncio.to_thread(engine.import_payees, req.payees)
    return PayeeImportResponse(imported=imported)


@router.delete("/payees/{payee}")
async def forget_payee(
    payee: str,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> dict[str, str]:
    removed = await asyncio.to_thread(engine.forget_payee, payee)
    if not removed:
        raise HTTPException(status_code=404, detail=f"Payee '{payee}' is not learned")
    return {"status": "forgotten"}
