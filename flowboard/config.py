"""Application configuration via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    debug: bool = False
    environment: str = "development"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # monday.com GraphQL API
    monday_api_url: str = "https://api.monday.com/v2"
    monday_api_token: str = ""
    # Sent as API-Version only when set; blank uses the account default
    monday_api_version: str = ""
    request_timeout: float = 30.0

    # Rate limiting (monday.com allows ~60 requests per minute per token)
    rate_limit_max_concurrent: int = 10
    rate_limit_min_interval: float = 0.1  # seconds between dispatches
    rate_limit_reservoir: int = 60
    rate_limit_refresh_interval: float = 60.0
    rate_limit_max_queue: int | None = 1000

    # Pagination
    page_size: int = 100
    max_pages: int = 100

    # Domain service response cache
    cache_ttl: float = 300
    cache_max_size: int = 256

    # Microsoft Foundry (LLM access via OpenAI-compatible API)
    foundry_openai_endpoint: str = ""
    foundry_api_key: str = ""
    foundry_deployment: str = "gpt-4.1"

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
