# site_analyser/core/config.py
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Flags that keep Chromium alive in small containers.
BASE_CHROME_FLAGS = [
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--single-process",
    "--disable-gpu",
]

HOSTED_CHROME_FLAGS = ["--no-sandbox", "--disable-setuid-sandbox"]


class Settings(BaseSettings):
    """Loads environment variables from .env file."""
    GROQ_API_KEY: Optional[str] = None
    PORT: int = 3000
    ENVIRONMENT: Literal["local", "hosted"] = "local"
    LOG_LEVEL: str = "INFO"

    # full: audit + inspection, audit_only: no inspection, mock: random scores
    ANALYSIS_MODE: Literal["full", "audit_only", "mock"] = "full"
    REPORT_FORMAT: Literal["html", "text"] = "html"

    LLM_MODEL: str = "llama-3.3-70b-versatile"
    LLM_MAX_TOKENS: int = 1000
    LLM_TEMPERATURE: float = 0.7
    LLM_TIMEOUT_SECONDS: float = 60.0

    LIGHTHOUSE_PATH: str = "lighthouse"
    AUDIT_TIMEOUT_SECONDS: float = 120.0
    NAVIGATION_TIMEOUT_MS: int = 30000
    ISSUE_SCORE_THRESHOLD: float = 0.9

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def ai_enabled(self) -> bool:
        return bool(self.GROQ_API_KEY) and self.ANALYSIS_MODE != "mock"

    @property
    def chrome_flags(self) -> List[str]:
        if self.ENVIRONMENT == "hosted":
            return HOSTED_CHROME_FLAGS + BASE_CHROME_FLAGS
        return list(BASE_CHROME_FLAGS)


@lru_cache
def get_settings() -> Settings:
    return Settings()
