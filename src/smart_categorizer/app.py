from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from smart_categorizer.api.routes import categorize, model, payees, rules
from smart_categorizer.core import settings
from smart_categorizer.engine import CategorizationEngine
from smart_categorizer.logger import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(engine: CategorizationEngine | None = None) -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if getattr(app.state, "engine", None) is None:
            logger.info("Initializing categorization engine...")
            settings.log_environment()
            app.state.engine = CategorizationEngine.from_settings()
        logger.info("Engine ready.")
        yield
        logger.info("Service shutting down.")

    app = FastAPI(title="Smart Categorizer", lifespan=lifespan)
    app.state.engine = engine

    app.include_router(categorize.router)
    app.include_router(payees.router)
    app.include_router(rules.router)
    app.include_router(model.router)

    return app
