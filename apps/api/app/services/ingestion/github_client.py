from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import httpx

from app.core.config import settings

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"


class GitHubAPIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class GitHubRateLimit:
    remaining: Optional[int]
    reset_epoch: Optional[int]


class GitHubClient:
    """
    Thin async wrapper over the GitHub REST API.
    One instance (and one underlying httpx.AsyncClient) per process.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base = base_url or settings.GITHUB_API_BASE
        self.token = token or settings.GITHUB_TOKEN
        self._client = httpx.AsyncClient(
            timeout=timeout or settings.GITHUB_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, token: Optional[str] = None, accept: str = "application/vnd.github+json") -> Dict[str, str]:
        headers = {
            "Accept": accept,
            "User-Agent": "repo-indexer-bot/0.1",
        }
        auth = token or self.token
        if auth:
            headers["Authorization"] = f"Bearer {auth}"
        return headers

    def _rate_limit(self, resp: httpx.Response) -> GitHubRateLimit:
        def _to_int(v: Optional[str]) -> Optional[int]:
            try:
                return int(v) if v is not None else None
            except ValueError:
                return None

        remaining = _to_int(resp.headers.get("x-ratelimit-remaining"))
        reset = _to_int(resp.headers.get("x-ratelimit-reset"))
        return GitHubRateLimit(remaining=remaining, reset_epoch=reset)

    async def _request(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
        accept: str = "application/vnd.github+json",
    ) -> httpx.Response:
        url = path if path.startswith("http") else f"{self.base}{path}"
        resp = await self._client.get(url, headers=self._headers(token, accept), params=params)

        if resp.status_code in (403, 429):
            rl = self._rate_limit(resp)
            # no retry here; remaining=0 means wait until reset
            raise GitHubAPIError(
                f"GitHub rate limit or forbidden. status={resp.status_code} "
                f"remaining={rl.remaining} reset={rl.reset_epoch} body={resp.text[:200]}",
                status_code=resp.status_code,
            )

        if resp.status_code >= 400:
            raise GitHubAPIError(
                f"GitHub API error status={resp.status_code} body={resp.text[:300]}",
                status_code=resp.status_code,
            )

        return resp

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None, token: Optional[str] = None) -> Any:
        resp = await self._request(path, params=params, token=token)
        return resp.json()

    async def get_repo(self, owner: str, repo: str, token: Optional[str] = None) -> Dict[str, Any]:
        return await self._get(f"/repos/{owner}/{repo}", token=token)

    async def get_tree(self, owner: str, repo: str, ref: str, token: Optional[str] = None) -> Dict[str, Any]:
        # a branch name resolves as tree-ish; recursive=1 returns the full tree
        return await self._get(f"/repos/{owner}/{repo}/git/trees/{ref}", params={"recursive": "1"}, token=token)

    async def get_blob(self, owner: str, repo: str, sha: str, token: Optional[str] = None) -> Dict[str, Any]:
        return await self._get(f"/repos/{owner}/{repo}/git/blobs/{sha}", token=token)

    async def list_commits(
        self, owner: str, repo: str, per_page: Optional[int] = None, token: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        params = {"per_page": per_page} if per_page else None
        return await self._get(f"/repos/{owner}/{repo}/commits", params=params, token=token)

    async def get_commit_diff(self, owner: str, repo: str, sha: str, token: Optional[str] = None) -> str:
        resp = await self._request(f"/repos/{owner}/{repo}/commits/{sha}", token=token, accept=DIFF_MEDIA_TYPE)
        return resp.text

    @staticmethod
    def decode_blob_content(blob_json: dict) -> bytes:
        # GitHub returns base64 with newlines sometimes
        enc = blob_json.get("encoding")
        content = blob_json.get("content", "")
        if enc != "base64":
            return content.encode("utf-8", errors="ignore")
        content = content.replace("\n", "")
        return base64.b64decode(content)
