from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from app.core.config import settings
from app.core.errors import CommitSummaryError, ProjectNotFound
from app.services.ingestion.github_client import GitHubClient
from app.utils.repo_url import parse_github_owner_repo


@dataclass
class CommitInfo:
    commit_hash: str
    commit_message: str
    commit_author_name: str
    commit_author_avatar: str
    commit_date: Optional[datetime]


def parse_commit_date(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


def commit_from_api(item: Dict[str, Any]) -> CommitInfo:
    commit = item.get("commit") or {}
    author = commit.get("author") or {}
    return CommitInfo(
        commit_hash=item["sha"],
        commit_message=commit.get("message") or "",
        commit_author_name=author.get("name") or "",
        commit_author_avatar=(item.get("author") or {}).get("avatar_url") or "",
        commit_date=parse_commit_date(author.get("date")),
    )


def unprocessed_commits(fetched: Iterable[CommitInfo], persisted_hashes: Iterable[str]) -> List[CommitInfo]:
    """Commits whose hash is not stored yet, in fetch order."""
    seen = set(persisted_hashes)
    return [c for c in fetched if c.commit_hash not in seen]


class CommitIngester:
    def __init__(self, store, client: GitHubClient, summarizer, limit: Optional[int] = None) -> None:
        self.store = store
        self.client = client
        self.summarizer = summarizer
        self.limit = limit or settings.COMMIT_HISTORY_LIMIT

    async def fetch_commit_history(self, repo_url: str) -> List[CommitInfo]:
        owner, repo = parse_github_owner_repo(repo_url)
        data = await self.client.list_commits(owner, repo)
        commits = [commit_from_api(item) for item in data]
        # undated commits sort last
        commits.sort(key=lambda c: c.commit_date.timestamp() if c.commit_date else float("-inf"), reverse=True)
        return commits[: self.limit]

    async def summarize_commit(self, repo_url: str, commit_hash: str) -> str:
        owner, repo = parse_github_owner_repo(repo_url)
        diff = await self.client.get_commit_diff(owner, repo, commit_hash)
        return await self.summarizer.summarize_commit(diff) or ""

    async def summarize_all(self, repo_url: str, commits: List[CommitInfo]) -> List[str]:
        # settle-all: every task runs to completion, a failure becomes ""
        results = await asyncio.gather(
            *(self.summarize_commit(repo_url, c.commit_hash) for c in commits),
            return_exceptions=True,
        )
        summaries: List[str] = []
        for commit, res in zip(commits, results):
            if isinstance(res, BaseException):
                logger.warning("{}", CommitSummaryError(commit.commit_hash, res))
                summaries.append("")
            else:
                summaries.append(res)
        return summaries

    async def ingest(self, project_id) -> List[Dict[str, Any]]:
        project = await self.store.get_project(project_id)
        if not project or not project.get("repo_url"):
            raise ProjectNotFound(f"Project {project_id} has no repository url")
        repo_url = project["repo_url"]
        logger.info("Commit ingestion started... {}", repo_url)

        fetched = await self.fetch_commit_history(repo_url)
        existing = await self.store.list_commits(project_id)
        pending = unprocessed_commits(fetched, (row["commit_hash"] for row in existing))

        summaries = await self.summarize_all(repo_url, pending)
        inserted = await self.store.insert_commits([
            {
                "project_id": project_id,
                "commit_hash": c.commit_hash,
                "commit_message": c.commit_message,
                "commit_author_name": c.commit_author_name,
                "commit_author_avatar": c.commit_author_avatar,
                "commit_date": c.commit_date,
                "summary": summary,
            }
            for c, summary in zip(pending, summaries)
        ])
        logger.info("Commit ingestion completed... {} ({} new)", repo_url, inserted)

        return await self.store.list_commits(project_id)
