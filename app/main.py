import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import settings
from .core.errors import register_error_handlers
from .core.logging_config import configure_logging
from .core.middleware import setup_middleware
from .database import close_db, init_db
from .routers import auth as auth_router
from .routers import expenses as expenses_router
from .routers import legacy_expenses as legacy_expenses_router


logger = logging.getLogger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    logger.info("Expense Tracker API started (%s)", settings.environment)
    yield
    close_db()


def create_app(enable_legacy_routes: Optional[bool] = None) -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Expense Tracker API",
        version="1.0.0",
        description="API Documentation for Expense Tracker",
        docs_url="/api-docs",
        lifespan=lifespan,
    )

    setup_middleware(app, settings.cors_origins)
    register_error_handlers(app)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(auth_router.router, prefix=API_PREFIX)
    app.include_router(expenses_router.router, prefix=API_PREFIX)

    if enable_legacy_routes is None:
        enable_legacy_routes = settings.enable_legacy_routes
    if enable_legacy_routes:
        app.include_router(legacy_expenses_router.router, prefix=API_PREFIX)
        logger.info("Public expense routes mounted at %s/public/expenses", API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.environment == "development")
