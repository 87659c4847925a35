from __future__ import annotations

from typing import List, Optional
from google import genai

from app.core.config import settings


class GeminiEmbedder:
    def __init__(self, api_key: Optional[str] = None, dim: Optional[int] = None, model: Optional[str] = None):
        key = api_key or settings.GEMINI_API_KEY
        if not key:
            raise RuntimeError("GEMINI_API_KEY is not set")
        self.client = genai.Client(api_key=key)
        self.dim = dim or settings.EMBEDDING_DIM
        self.model = model or settings.GEMINI_EMBED_MODEL

    async def embed_text(self, text: str) -> List[float]:
        # optional inputs go under `config` in the google-genai SDK
        res = await self.client.aio.models.embed_content(
            model=self.model,
            contents=text,
            config={"output_dimensionality": self.dim},
        )
        return list(res.embeddings[0].values)
