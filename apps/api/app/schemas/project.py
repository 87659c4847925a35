from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from app.services.projects.status import ProjectStatus

class CreateProjectRequest(BaseModel):
    name: str = Field(..., min_length=1)
    repo_url: str = Field(..., description="Public GitHub repository URL, https://github.com/<owner>/<repo>")
    github_token: Optional[str] = None

class ProjectOut(BaseModel):
    project_id: str
    name: str
    repo_url: str
    status: ProjectStatus
    error: Optional[str] = None
    created_at: datetime
    deleted_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "ProjectOut":
        return cls(
            project_id=str(doc["_id"]),
            name=doc.get("name", ""),
            repo_url=doc.get("repo_url", ""),
            status=doc["status"],
            error=doc.get("error"),
            created_at=doc["created_at"],
            deleted_at=doc.get("deleted_at"),
        )

class ProjectStatusOut(BaseModel):
    project_id: str
    status: Optional[ProjectStatus] = None
