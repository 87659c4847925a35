from typing import Optional

import httpx

from app.core.config import settings

class OllamaEmbedder:
    def __init__(self, model: Optional[str] = None, base_url: Optional[str] = None, timeout: float = 60):
        self.model = model or settings.OLLAMA_EMBED_MODEL
        self.url = f"{base_url or settings.OLLAMA_BASE_URL}/api/embeddings"
        self.timeout = timeout

    async def embed_text(self, text: str) -> list[float]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.post(
                self.url,
                json={"model": self.model, "prompt": text},
            )
        r.raise_for_status()
        return r.json()["embedding"]
