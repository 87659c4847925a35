"""Tests for GitHub repository URL validation."""

import pytest

from app.core.errors import RepoValidationError
from app.utils.repo_url import parse_github_owner_repo, validate_repo_url


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/octocat/hello-world",
        "https://github.com/octocat/hello-world/",
        "http://www.github.com/octo_cat/Hello_World",
        "  https://github.com/a/b  ",
    ],
)
def test_accepts_path_style_github_urls(url):
    assert validate_repo_url(url) == url.strip().rstrip("/")


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/octocat/hello-world.git",
        "https://github.com/octocat/hello-world.git/",
    ],
)
def test_rejects_vcs_suffix(url):
    with pytest.raises(RepoValidationError, match=r"\.git"):
        validate_repo_url(url)


@pytest.mark.parametrize(
    "url",
    [
        "",
        "github.com/octocat/hello-world",
        "https://gitlab.com/octocat/hello-world",
        "https://github.com/octocat",
        "https://github.com/octocat/hello-world/tree/main",
        "ftp://github.com/octocat/hello-world",
        "https://github.com/octo cat/hello",
    ],
)
def test_rejects_non_repository_urls(url):
    with pytest.raises(RepoValidationError, match="Invalid GitHub repository URL"):
        validate_repo_url(url)


def test_parse_owner_repo():
    assert parse_github_owner_repo("https://github.com/octocat/hello-world") == ("octocat", "hello-world")


def test_parse_owner_repo_missing_repo():
    with pytest.raises(ValueError):
        parse_github_owner_repo("https://github.com/octocat")
