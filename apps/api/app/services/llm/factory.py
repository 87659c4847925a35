from __future__ import annotations

from typing import Protocol

from app.core.config import settings


class Summarizer(Protocol):
    async def summarize_code(self, path: str, content: str) -> str: ...

    async def summarize_commit(self, diff: str) -> str: ...


def get_summarizer(provider: str | None = None) -> Summarizer:
    provider = (provider or settings.LLM_PROVIDER).lower()
    if provider == "gemini":
        from app.services.llm.gemini_chat import GeminiSummarizer
        return GeminiSummarizer()
    if provider == "ollama":
        from app.services.llm.ollama_llm import OllamaSummarizer
        return OllamaSummarizer()
    raise ValueError(f"Unknown LLM_PROVIDER: {provider}")
