from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "repo-indexer-api"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "repo_indexer"

    GITHUB_TOKEN: str | None = None
    GITHUB_API_BASE: str = "https://api.github.com"
    GITHUB_TIMEOUT_SECONDS: float = 30.0
    GITHUB_DEFAULT_BRANCH: str = "main"

    # repository loader
    LOADER_MAX_CONCURRENCY: int = 5
    LOADER_IGNORE_FILES: List[str] = [
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "bun.lockb",
    ]
    MAX_FILE_BYTES: int = 200_000

    COMMIT_HISTORY_LIMIT: int = 15
    INDEX_WORKERS: int = 2
    STATUS_POLL_INTERVAL_SECONDS: float = 5.0

    GEMINI_API_KEY: str | None = None
    EMBEDDING_DIM: int = 768
    EMBEDDING_PROVIDER: str = "gemini"  # gemini | ollama
    GEMINI_EMBED_MODEL: str = "gemini-embedding-001"
    OLLAMA_EMBED_MODEL: str = "nomic-embed-text"

    LLM_PROVIDER: str = "gemini"  # gemini | ollama
    GEMINI_CHAT_MODEL: str = "gemini-2.0-flash"
    OLLAMA_MODEL: str = "qwen2.5-coder:7b-instruct"
    OLLAMA_BASE_URL: str = "http://127.0.0.1:11434"
    SUMMARY_MAX_CHARS: int = 10_000

settings = Settings()
