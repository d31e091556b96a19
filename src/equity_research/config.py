"""Configuration management via environment variables.

Reads from .env file (via pydantic-settings) with sensible defaults.
All values can be overridden via environment variables.

Required for live data:
    FMP_API_KEY         — Financial Modeling Prep key for profile/quote/metrics

Optional:
    LLM_PROVIDER        — "openrouter" (default) or "anthropic"
    OPENROUTER_API_KEY  — For analysis generation through OpenRouter
    ANTHROPIC_API_KEY   — For analysis generation through Claude
    TESTING_MODE        — Serve canned Tesla data instead of calling any API
    PORT                — Dashboard port
"""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Financial Modeling Prep market data
    fmp_api_key: str = ""
    fmp_base_url: str = "https://financialmodelingprep.com/api/v3"

    # Language model used for the research narrative
    llm_provider: Literal["openrouter", "anthropic"] = "openrouter"
    openrouter_api_key: str = ""
    openrouter_model: str = "openai/gpt-4o-mini"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"

    # Lower temperature keeps the section format stable
    analysis_temperature: float = 0.3
    analysis_max_tokens: int = 4000

    # Seconds per HTTP call; failures are not retried
    request_timeout: int = 30
    analysis_timeout: int = 120

    # Mock data instead of live APIs
    testing_mode: bool = False

    port: int = 8877

    # Strip whitespace from string fields; the .env file often has
    # trailing spaces or quotes that break API keys
    @field_validator(
        "fmp_api_key", "openrouter_api_key", "anthropic_api_key", "fmp_base_url",
        mode="before",
    )
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().strip('"').strip("'").strip()
        return v

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_config: Settings | None = None


def get_config() -> Settings:
    """Get or create the shared Settings singleton."""
    global _config
    if _config is None:
        _config = Settings()
    return _config


def reset_config() -> None:
    """Drop the cached Settings so the next get_config() re-reads the environment."""
    global _config
    _config = None
