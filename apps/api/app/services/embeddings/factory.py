from __future__ import annotations

from typing import List, Protocol

from app.core.config import settings


class Embedder(Protocol):
    async def embed_text(self, text: str) -> List[float]: ...


def get_embedder(provider: str | None = None) -> Embedder:
    provider = (provider or settings.EMBEDDING_PROVIDER).lower()
    if provider == "gemini":
        from app.services.embeddings.gemini_embedder import GeminiEmbedder
        return GeminiEmbedder()
    if provider == "ollama":
        from app.services.embeddings.ollama_embedder import OllamaEmbedder
        return OllamaEmbedder()
    raise ValueError(f"Unknown EMBEDDING_PROVIDER: {provider}")
