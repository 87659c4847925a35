import pytest

from app.services.ingestion.repo_loader import RepoDocument

from fakes import EchoSummarizer, InMemoryStore, LengthEmbedder, make_api_commit


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def summarizer():
    return EchoSummarizer()


@pytest.fixture
def embedder():
    return LengthEmbedder()


@pytest.fixture
def docs():
    return [
        RepoDocument(path="src/main.py", content="print('hi')\n"),
        RepoDocument(path="src/util.py", content="def f():\n    return 1\n"),
        RepoDocument(path="README.md", content="# demo\n"),
    ]


@pytest.fixture
def make_commit():
    return make_api_commit
