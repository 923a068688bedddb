from fastapi import HTTPException, Request

from smart_categorizer.engine import CategorizationEngine


def get_engine(request: Request) -> CategorizationEngine:
    engine = getattr(request.app.state, "engine", None)
    if not engine:
        raise HTTPException(status_code=500, detail="Engine not initialized")
    return engine
