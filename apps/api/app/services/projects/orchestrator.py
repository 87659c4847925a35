from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger

from app.core.errors import RepoValidationError
from app.services.ingestion.github_client import GitHubAPIError, GitHubClient
from app.services.projects.jobs import JobRunner
from app.services.projects.status import ProjectStatus, StatusController
from app.utils.repo_url import parse_github_owner_repo, validate_repo_url


class ProjectOrchestrator:
    def __init__(
        self,
        store,
        github: GitHubClient,
        status: StatusController,
        indexer,
        commit_ingester,
        jobs: JobRunner,
    ) -> None:
        self.store = store
        self.github = github
        self.status = status
        self.indexer = indexer
        self.commit_ingester = commit_ingester
        self.jobs = jobs

    async def check_repository(self, repo_url: str, token: Optional[str] = None) -> str:
        """Validate the URL and make sure the repository exists and is public."""
        url = validate_repo_url(repo_url)
        owner, repo = parse_github_owner_repo(url)
        try:
            info = await self.github.get_repo(owner, repo, token=token)
        except GitHubAPIError as e:
            if e.status_code == 404:
                raise RepoValidationError("Can't find GitHub repository") from e
            raise
        if info.get("private"):
            raise RepoValidationError("Can't link private repository")
        return url

    async def create_project(self, name: str, repo_url: str, token: Optional[str] = None) -> Dict[str, Any]:
        url = await self.check_repository(repo_url, token)
        project = await self.store.create_project(name=name, repo_url=url)
        logger.info("Project {} created for {}", project["_id"], url)

        self.jobs.submit(project["_id"], lambda: self.run_indexing_job(project["_id"], url, token))
        return project

    async def run_indexing_job(self, project_id, repo_url: str, token: Optional[str] = None) -> None:
        try:
            if not await self.status.transition(project_id, ProjectStatus.PROCESSING):
                return
            stats = await self.indexer.index(project_id, repo_url, token)
            await self.status.transition(project_id, ProjectStatus.COMPLETED)
            logger.info("Project {} indexed: {}", project_id, stats)
        except Exception as e:
            logger.exception("Indexing failed for project {}", project_id)
            await self.status.transition(project_id, ProjectStatus.FAILED, error=str(e))

    async def ingest_commits(self, project_id) -> List[Dict[str, Any]]:
        return await self.jobs.run_exclusive(project_id, lambda: self.commit_ingester.ingest(project_id))
