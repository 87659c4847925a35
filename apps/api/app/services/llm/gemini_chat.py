from __future__ import annotations
from typing import Optional
from google import genai
from google.genai.errors import ClientError

from app.core.config import settings
from app.services.llm.prompts import code_summary_prompt, commit_summary_prompt


class LLMRateLimitError(Exception):
    pass


class GeminiSummarizer:
    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, max_chars: Optional[int] = None):
        key = api_key or settings.GEMINI_API_KEY
        if not key:
            raise RuntimeError("GEMINI_API_KEY is not set")
        self.client = genai.Client(api_key=key)
        self.model = model or settings.GEMINI_CHAT_MODEL
        self.max_chars = max_chars or settings.SUMMARY_MAX_CHARS

    async def generate(self, prompt: str) -> str:
        try:
            res = await self.client.aio.models.generate_content(model=self.model, contents=prompt)
            return (res.text or "").strip()
        except ClientError as e:
            # 429 quota/rate-limit
            if getattr(e, "code", None) == 429 or getattr(e, "status_code", None) == 429:
                raise LLMRateLimitError(str(e)) from e
            raise

    async def summarize_code(self, path: str, content: str) -> str:
        return await self.generate(code_summary_prompt(path, content, self.max_chars))

    async def summarize_commit(self, diff: str) -> str:
        return await self.generate(commit_summary_prompt(diff, self.max_chars))
