from fastapi import APIRouter, Depends
from loguru import logger

from app.core.deps import Services, get_services

async def mongo_ok(services: Services) -> bool:
    try:
        return await services.store.ping()
    except Exception as e:
        logger.warning("mongo ping failed: {!r}", e)
        return False

router = APIRouter(tags=["health"])

@router.get("/health")
async def health(services: Services = Depends(get_services)):
    return {
        "status": "ok",
        "mongo": await mongo_ok(services),
        "background_jobs": services.jobs.pending,
    }
