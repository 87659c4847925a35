from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from app.core.errors import FileIndexingError
from app.services.ingestion.repo_loader import RepoDocument


@dataclass
class EmbeddedFile:
    file_name: str
    source_code: str
    summary: str
    embedding: List[float]


@dataclass
class IndexStats:
    loaded: int = 0
    embedded: int = 0
    persisted: int = 0
    failed: int = 0


def sanitize_source(text: str) -> str:
    # NUL bytes are rejected by some storage layers
    return text.replace("\x00", "")


class RepoIndexer:
    def __init__(self, store, loader, summarizer, embedder) -> None:
        self.store = store
        self.loader = loader
        self.summarizer = summarizer
        self.embedder = embedder

    async def index(self, project_id, repo_url: str, token: Optional[str] = None) -> IndexStats:
        """
        Load, summarize, embed and persist every file of the repository.

        A failure on one file is logged and that file is skipped; only a
        loader failure escapes to the caller.
        """
        stats = IndexStats()
        logger.info("Starting GitHub repo indexing... {}", repo_url)

        docs = await self.loader.load(repo_url, token)
        stats.loaded = len(docs)
        logger.info("Loaded {} documents from repo... {}", stats.loaded, repo_url)

        embedded = await self.embed_documents(docs)
        stats.embedded = len(embedded)
        stats.failed = stats.loaded - stats.embedded
        logger.info("Generated embeddings for {} documents... {}", stats.embedded, repo_url)

        for item in embedded:
            try:
                await self.persist(project_id, item)
            except Exception as e:
                stats.failed += 1
                logger.error("{}", FileIndexingError(item.file_name, "persist", e))
                continue
            stats.persisted += 1
            logger.debug("Processed {}/{} embeddings... {}", stats.persisted, stats.embedded, repo_url)

        logger.info("Finished indexing GitHub repo... {} {}", repo_url, stats)
        return stats

    async def embed_documents(self, docs: List[RepoDocument]) -> List[EmbeddedFile]:
        # one document at a time to stay inside LLM/embedding rate limits
        results: List[EmbeddedFile] = []
        for doc in docs:
            stage = "summarize"
            try:
                summary = await self.summarizer.summarize_code(doc.path, doc.content)
                stage = "embed"
                vector = await self.embedder.embed_text(summary)
            except Exception as e:
                logger.error("{}", FileIndexingError(doc.path, stage, e))
                continue

            results.append(EmbeddedFile(
                file_name=doc.path,
                source_code=doc.content,
                summary=summary,
                embedding=list(vector),
            ))
        return results

    async def persist(self, project_id, item: EmbeddedFile) -> None:
        record_id = await self.store.create_file_record(
            summary=item.summary,
            source_code=sanitize_source(item.source_code),
            file_name=item.file_name,
            project_id=project_id,
        )
        await self.store.set_vector(record_id, item.embedding)
