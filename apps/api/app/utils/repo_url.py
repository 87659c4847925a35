import re
from urllib.parse import urlparse

from app.core.errors import RepoValidationError

GITHUB_REPO_RE = re.compile(r"^https?://(www\.)?github\.com/[\w-]+/[\w-]+/?$")
VCS_SUFFIX = ".git"


def validate_repo_url(raw: str) -> str:
    """
    Accepts only path-style GitHub repo URLs:
    - https://github.com/<owner>/<repo> (optional www, optional trailing '/')
    - rejects a trailing '.git' with its own message
    Returns the URL without surrounding whitespace or trailing '/'.
    """
    s = (raw or "").strip()

    if s.rstrip("/").endswith(VCS_SUFFIX):
        raise RepoValidationError('Remove ".git" from the end of the URL')

    if not GITHUB_REPO_RE.match(s):
        raise RepoValidationError("Invalid GitHub repository URL")

    return s.rstrip("/")


def parse_github_owner_repo(repo_url: str) -> tuple[str, str]:
    u = urlparse(repo_url)
    parts = [p for p in (u.path or "").split("/") if p]
    if len(parts) < 2:
        raise ValueError("Invalid GitHub repo URL (missing owner/repo)")
    return parts[-2], parts[-1]
