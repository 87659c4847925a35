from fastapi import FastAPI
from app.core.config import settings
from app.core.deps import build_services
from app.core.logging import setup_logging

from app.api.v1.health import router as health_router
from app.api.v1.projects import router as projects_router
from app.api.v1.commits import router as commits_router

logger = setup_logging()

def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME)

    @app.on_event("startup")
    async def _startup():
        app.state.services = build_services()
        await app.state.services.store.ensure_indexes()
        logger.info("Indexes ensured")

    @app.on_event("shutdown")
    async def _shutdown():
        services = getattr(app.state, "services", None)
        if services is not None:
            await services.aclose()
            logger.info("Services closed")

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(projects_router, prefix="/api/v1")
    app.include_router(commits_router, prefix="/api/v1")

    return app

app = create_app()
