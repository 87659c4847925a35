"""Tests for RepoIndexer: per-file isolation, sanitizing and two-phase writes."""

import pytest
from bson import ObjectId

from app.services.indexing.indexer import RepoIndexer, sanitize_source
from app.services.ingestion.repo_loader import RepoDocument

from fakes import EchoSummarizer, LengthEmbedder, StaticLoader

REPO = "https://github.com/octocat/hello-world"


def _persisted(store):
    return {f["file_name"]: f for f in store.files.values()}


def test_sanitize_source_strips_nul():
    assert sanitize_source("a\x00b\x00") == "ab"
    assert sanitize_source("clean") == "clean"


@pytest.mark.asyncio
async def test_indexes_every_document(store, summarizer, embedder, docs):
    pid = ObjectId()
    loader = StaticLoader(docs)
    indexer = RepoIndexer(store, loader, summarizer, embedder)

    stats = await indexer.index(pid, REPO, token="tok")

    assert loader.calls == [(REPO, "tok")]
    assert (stats.loaded, stats.embedded, stats.persisted, stats.failed) == (3, 3, 3, 0)
    rows = _persisted(store)
    assert set(rows) == {"src/main.py", "src/util.py", "README.md"}
    for name, row in rows.items():
        assert row["project_id"] == pid
        assert row["summary"] == f"summary of {name}"
        assert row["summary_embedding"] == [float(len(row["summary"])), 1.0, 0.0]


@pytest.mark.asyncio
async def test_summarize_failure_drops_only_that_file(store, embedder, docs):
    summarizer = EchoSummarizer(fail_on={"src/util.py"})
    indexer = RepoIndexer(store, StaticLoader(docs), summarizer, embedder)

    stats = await indexer.index(ObjectId(), REPO)

    assert set(_persisted(store)) == {"src/main.py", "README.md"}
    assert stats.failed == 1
    # later documents are still attempted
    assert summarizer.code_calls == ["src/main.py", "src/util.py", "README.md"]


@pytest.mark.asyncio
async def test_embed_failure_drops_only_that_file(store, summarizer, docs):
    embedder = LengthEmbedder(fail_on={"summary of src/main.py"})
    indexer = RepoIndexer(store, StaticLoader(docs), summarizer, embedder)

    stats = await indexer.index(ObjectId(), REPO)

    rows = _persisted(store)
    assert set(rows) == {"src/util.py", "README.md"}
    assert all("summary_embedding" in r for r in rows.values())
    assert stats.embedded == 2


@pytest.mark.asyncio
async def test_persist_failure_does_not_abort_remaining(store, summarizer, embedder, docs):
    real_create = store.create_file_record

    async def flaky_create(summary, source_code, file_name, project_id):
        if file_name == "src/main.py":
            raise RuntimeError("write rejected")
        return await real_create(summary, source_code, file_name, project_id)

    store.create_file_record = flaky_create
    indexer = RepoIndexer(store, StaticLoader(docs), summarizer, embedder)

    stats = await indexer.index(ObjectId(), REPO)

    assert set(_persisted(store)) == {"src/util.py", "README.md"}
    assert stats.persisted == 2
    assert stats.failed == 1


@pytest.mark.asyncio
async def test_vector_failure_leaves_summary_only_row(store, summarizer, embedder, docs):
    async def broken_set_vector(record_id, vector):
        raise RuntimeError("vector column unavailable")

    store.set_vector = broken_set_vector
    indexer = RepoIndexer(store, StaticLoader(docs[:1]), summarizer, embedder)

    stats = await indexer.index(ObjectId(), REPO)

    (row,) = store.files.values()
    assert row["summary"] == "summary of src/main.py"
    assert "summary_embedding" not in row
    assert stats.persisted == 0


@pytest.mark.asyncio
async def test_persisted_source_has_no_nul_bytes(store, summarizer, embedder):
    docs = [RepoDocument(path="weird.txt", content="abc\x00def\x00")]
    indexer = RepoIndexer(store, StaticLoader(docs), summarizer, embedder)

    await indexer.index(ObjectId(), REPO)

    (row,) = store.files.values()
    assert row["source_code"] == "abcdef"
    assert "\x00" not in row["source_code"]


@pytest.mark.asyncio
async def test_loader_failure_propagates(store, summarizer, embedder):
    indexer = RepoIndexer(store, StaticLoader(error=RuntimeError("tree not found")), summarizer, embedder)

    with pytest.raises(RuntimeError, match="tree not found"):
        await indexer.index(ObjectId(), REPO)
    assert store.files == {}
