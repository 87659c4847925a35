from fastapi import APIRouter, Depends, HTTPException, status

from app.core.deps import Services, get_services
from app.core.errors import RepoValidationError
from app.schemas.project import CreateProjectRequest, ProjectOut, ProjectStatusOut
from app.services.ingestion.github_client import GitHubAPIError

router = APIRouter(tags=["projects"])

@router.post("/projects", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(payload: CreateProjectRequest, services: Services = Depends(get_services)):
    try:
        project = await services.orchestrator.create_project(
            name=payload.name,
            repo_url=payload.repo_url,
            token=payload.github_token,
        )
    except RepoValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GitHubAPIError as e:
        raise HTTPException(status_code=502, detail=f"GitHub lookup failed: {e}")

    return ProjectOut.from_doc(project)

@router.get("/projects/{project_id}/status", response_model=ProjectStatusOut)
async def get_project_status(project_id: str, services: Services = Depends(get_services)):
    current = await services.status.read_status(project_id)
    return ProjectStatusOut(project_id=project_id, status=current)

@router.delete("/projects/{project_id}", response_model=ProjectOut)
async def archive_project(project_id: str, services: Services = Depends(get_services)):
    project = await services.store.archive_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return ProjectOut.from_doc(project)
