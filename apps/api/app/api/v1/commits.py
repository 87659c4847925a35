from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from app.core.deps import Services, get_services
from app.schemas.commit import CommitOut

router = APIRouter(tags=["commits"])

@router.get("/projects/{project_id}/commits", response_model=list[CommitOut])
async def list_commits(project_id: str, services: Services = Depends(get_services)):
    project = await services.store.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    # fresh commits are pulled on every read; a failed pull still returns what is stored
    try:
        await services.orchestrator.ingest_commits(project_id)
    except Exception:
        logger.exception("Commit ingestion failed for project {}", project_id)

    rows = await services.store.list_commits(project_id)
    return [CommitOut.from_doc(r) for r in rows]
