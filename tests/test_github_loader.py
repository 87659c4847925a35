"""Tests for GitHubClient and GithubRepoLoader against a mocked GitHub API."""

import asyncio
import base64

import httpx
import pytest

from app.services.ingestion.github_client import DIFF_MEDIA_TYPE, GitHubAPIError, GitHubClient
from app.services.ingestion.repo_loader import GithubRepoLoader

REPO = "https://github.com/octocat/hello-world"


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


BLOBS = {
    "s1": b"print('hello')\n",
    "s2": b"\x89PNG\r\n\x1a\n\x00\x00binary",
    "s3": b"{}\n",
    "s4": "café = 1\n".encode("utf-8"),
    "s5": b"\xff\xfe\xfa not utf8",
}

TREE = {
    "sha": "main",
    "truncated": False,
    "tree": [
        {"path": "src", "type": "tree", "sha": "t1"},
        {"path": "src/app.py", "type": "blob", "sha": "s1", "size": 15},
        {"path": "logo.png", "type": "blob", "sha": "s2", "size": 20},
        {"path": "package-lock.json", "type": "blob", "sha": "s3", "size": 3},
        {"path": "web/yarn.lock", "type": "blob", "sha": "s3", "size": 3},
        {"path": "src/cafe.py", "type": "blob", "sha": "s4", "size": 10},
        {"path": "latin1.txt", "type": "blob", "sha": "s5", "size": 12},
        {"path": "big.sql", "type": "blob", "sha": "s1", "size": 10_000_000},
    ],
}


def github_handler(seen):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        path = request.url.path
        if path == "/repos/octocat/hello-world/git/trees/main":
            assert request.url.params["recursive"] == "1"
            return httpx.Response(200, json=TREE)
        if path.startswith("/repos/octocat/hello-world/git/blobs/"):
            sha = path.rsplit("/", 1)[-1]
            return httpx.Response(200, json={"encoding": "base64", "content": _b64(BLOBS[sha])})
        if path == "/repos/octocat/hello-world/commits/abc":
            assert request.headers["accept"] == DIFF_MEDIA_TYPE
            return httpx.Response(200, text="diff --git a/x b/x\n+added\n")
        if path == "/repos/octocat/private":
            return httpx.Response(404, json={"message": "Not Found"})
        if path == "/repos/octocat/limited":
            return httpx.Response(403, headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "1700000000"})
        return httpx.Response(500)

    return handler


@pytest.fixture
def seen():
    return []


@pytest.fixture
def client(seen):
    return GitHubClient(token="env-token", base_url="https://api.github.test", transport=httpx.MockTransport(github_handler(seen)))


@pytest.mark.asyncio
async def test_loader_returns_text_files_in_tree_order(client):
    loader = GithubRepoLoader(client, branch="main")

    docs = await loader.load(REPO)

    assert [(d.path, d.content) for d in docs] == [
        ("src/app.py", "print('hello')\n"),
        ("src/cafe.py", "café = 1\n"),
    ]


@pytest.mark.asyncio
async def test_loader_skips_lockfiles_without_fetching(client, seen):
    await GithubRepoLoader(client, branch="main").load(REPO)

    fetched = [r.url.path for r in seen if "/git/blobs/" in r.url.path]
    assert "/repos/octocat/hello-world/git/blobs/s3" not in fetched
    # oversized file is skipped from the tree size alone
    assert fetched.count("/repos/octocat/hello-world/git/blobs/s1") == 1


@pytest.mark.asyncio
async def test_loader_extra_ignore_names_extend_lockfile_list(client):
    loader = GithubRepoLoader(client, branch="main", ignore_files=["app.py"])

    docs = await loader.load(REPO)

    # lockfiles stay ignored alongside the extra name
    assert [d.path for d in docs] == ["src/cafe.py"]
    assert loader.is_ignored("web/yarn.lock")


@pytest.mark.asyncio
async def test_request_token_overrides_configured_token(client, seen):
    await GithubRepoLoader(client, branch="main").load(REPO, token="user-token")

    assert {r.headers["authorization"] for r in seen} == {"Bearer user-token"}


@pytest.mark.asyncio
async def test_loader_bounds_concurrent_fetches():
    in_flight = 0
    peak = 0

    class SlowClient:
        async def get_tree(self, owner, repo, ref, token=None):
            return {"tree": [{"path": f"f{i}.py", "type": "blob", "sha": str(i), "size": 1} for i in range(12)]}

        async def get_blob(self, owner, repo, sha, token=None):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return {"encoding": "utf-8", "content": f"x = {sha}\n"}

        decode_blob_content = staticmethod(GitHubClient.decode_blob_content)

    docs = await GithubRepoLoader(SlowClient(), max_concurrency=3).load(REPO)

    assert peak <= 3
    assert [d.path for d in docs] == [f"f{i}.py" for i in range(12)]


@pytest.mark.asyncio
async def test_commit_diff_uses_diff_media_type(client):
    diff = await client.get_commit_diff("octocat", "hello-world", "abc")
    assert diff.startswith("diff --git")


@pytest.mark.asyncio
async def test_not_found_carries_status_code(client):
    with pytest.raises(GitHubAPIError) as exc:
        await client.get_repo("octocat", "private")
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_rate_limit_error_reports_reset(client):
    with pytest.raises(GitHubAPIError, match="remaining=0 reset=1700000000"):
        await client.get_repo("octocat", "limited")


def test_decode_blob_content_handles_wrapped_base64():
    raw = b"line one\nline two\n" * 10
    encoded = _b64(raw)
    wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60))

    assert GitHubClient.decode_blob_content({"encoding": "base64", "content": wrapped}) == raw


@pytest.mark.asyncio
async def test_failed_fetch_cancels_remaining_fetches():
    cancelled = []

    class FailingClient:
        async def get_tree(self, owner, repo, ref, token=None):
            return {"tree": [{"path": f"f{i}.py", "type": "blob", "sha": str(i), "size": 1} for i in range(4)]}

        async def get_blob(self, owner, repo, sha, token=None):
            if sha == "0":
                await asyncio.sleep(0.01)
                raise GitHubAPIError("blob gone", status_code=404)
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(sha)
                raise
            return {"encoding": "utf-8", "content": ""}

        decode_blob_content = staticmethod(GitHubClient.decode_blob_content)

    with pytest.raises(GitHubAPIError, match="blob gone"):
        await GithubRepoLoader(FailingClient(), max_concurrency=4).load(REPO)

    assert sorted(cancelled) == ["1", "2", "3"]
