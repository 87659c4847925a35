from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from app.db.mongo import create_mongo_client, get_database
from app.db.store import MongoEmbeddingStore
from app.services.embeddings.factory import get_embedder
from app.services.indexing.indexer import RepoIndexer
from app.services.ingestion.commits import CommitIngester
from app.services.ingestion.github_client import GitHubClient
from app.services.ingestion.repo_loader import GithubRepoLoader
from app.services.llm.factory import get_summarizer
from app.services.projects.jobs import JobRunner
from app.services.projects.orchestrator import ProjectOrchestrator
from app.services.projects.status import StatusController


@dataclass
class Services:
    store: MongoEmbeddingStore
    github: GitHubClient
    status: StatusController
    orchestrator: ProjectOrchestrator
    jobs: JobRunner
    mongo_client: object = None

    async def aclose(self) -> None:
        await self.jobs.shutdown()
        await self.github.aclose()
        if self.mongo_client is not None:
            self.mongo_client.close()


def build_services() -> Services:
    """Construct the process-wide clients once and wire them together."""
    mongo_client = create_mongo_client()
    store = MongoEmbeddingStore(get_database(mongo_client))
    github = GitHubClient()
    summarizer = get_summarizer()
    embedder = get_embedder()

    status = StatusController(store)
    jobs = JobRunner()
    orchestrator = ProjectOrchestrator(
        store=store,
        github=github,
        status=status,
        indexer=RepoIndexer(store, GithubRepoLoader(github), summarizer, embedder),
        commit_ingester=CommitIngester(store, github, summarizer),
        jobs=jobs,
    )
    return Services(
        store=store,
        github=github,
        status=status,
        orchestrator=orchestrator,
        jobs=jobs,
        mongo_client=mongo_client,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
