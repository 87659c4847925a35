from __future__ import annotations
from typing import Optional
import httpx

from app.core.config import settings
from app.services.llm.prompts import code_summary_prompt, commit_summary_prompt

class OllamaSummarizer:
    def __init__(
        self,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        max_chars: Optional[int] = None,
    ):
        self.model = model or settings.OLLAMA_MODEL
        self.url = f"{base_url or settings.OLLAMA_BASE_URL}/api/generate"
        self.timeout = timeout
        self.max_chars = max_chars or settings.SUMMARY_MAX_CHARS

    async def generate(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.post(self.url, json=payload)
            r.raise_for_status()
            data = r.json()

        return (data.get("response") or "").strip()

    async def summarize_code(self, path: str, content: str) -> str:
        return await self.generate(code_summary_prompt(path, content, self.max_chars))

    async def summarize_commit(self, diff: str) -> str:
        return await self.generate(commit_summary_prompt(diff, self.max_chars))
