from __future__ import annotations

import asyncio
import posixpath
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from app.core.config import settings
from app.services.ingestion.github_client import GitHubClient
from app.utils.repo_url import parse_github_owner_repo

BINARY_SNIFF_BYTES = 8192


@dataclass
class RepoDocument:
    path: str
    content: str


def _looks_binary(data: bytes) -> bool:
    return b"\x00" in data[:BINARY_SNIFF_BYTES]  # null byte check


class GithubRepoLoader:
    """
    Loads every text file of one branch as (path, content) documents.

    Blob fetches run concurrently up to ``max_concurrency``; the returned
    list keeps the tree order regardless of completion order. If any fetch
    raises, the remaining fetches are cancelled before the error propagates.

    ``ignore_files`` names (basenames) are added to LOADER_IGNORE_FILES.
    """

    def __init__(
        self,
        client: GitHubClient,
        branch: Optional[str] = None,
        ignore_files: Optional[Sequence[str]] = None,
        max_concurrency: Optional[int] = None,
        max_file_bytes: Optional[int] = None,
    ) -> None:
        self.client = client
        self.branch = branch or settings.GITHUB_DEFAULT_BRANCH
        # extra names add to the lockfile list, they never replace it
        self.ignore_files = set(settings.LOADER_IGNORE_FILES) | set(ignore_files or ())
        self.max_concurrency = max_concurrency or settings.LOADER_MAX_CONCURRENCY
        self.max_file_bytes = max_file_bytes or settings.MAX_FILE_BYTES

    def is_ignored(self, path: str) -> bool:
        return posixpath.basename(path) in self.ignore_files

    async def load(self, repo_url: str, token: Optional[str] = None) -> List[RepoDocument]:
        owner, repo = parse_github_owner_repo(repo_url)
        tree = await self.client.get_tree(owner, repo, self.branch, token=token)
        if tree.get("truncated"):
            logger.warning("Tree listing truncated by GitHub for {}", repo_url)

        blobs = [
            it for it in tree.get("tree", [])
            if it.get("type") == "blob" and not self.is_ignored(it.get("path") or "")
        ]

        sem = asyncio.Semaphore(self.max_concurrency)

        async def _fetch(item: Dict[str, Any]) -> Optional[RepoDocument]:
            async with sem:
                return await self._fetch_document(owner, repo, item, token)

        tasks = [asyncio.ensure_future(_fetch(it)) for it in blobs]
        try:
            docs = await asyncio.gather(*tasks)
        except BaseException:
            # one failed fetch fails the load; stop the rest
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return [d for d in docs if d is not None]

    async def _fetch_document(
        self, owner: str, repo: str, item: Dict[str, Any], token: Optional[str]
    ) -> Optional[RepoDocument]:
        path = item.get("path") or ""
        size = item.get("size") or 0

        if size > self.max_file_bytes:
            logger.warning("Skipping {} ({} bytes, over limit)", path, size)
            return None

        blob_json = await self.client.get_blob(owner, repo, item["sha"], token=token)
        raw_bytes = self.client.decode_blob_content(blob_json)

        if _looks_binary(raw_bytes):
            logger.warning("Skipping unknown/binary file {}", path)
            return None

        try:
            text = raw_bytes.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Skipping unknown/binary file {} (not utf-8)", path)
            return None

        return RepoDocument(path=path, content=text)
