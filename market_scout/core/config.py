"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DIRECTORY_PROVIDERS = {"auto", "google", "serpapi", "mock"}


class ConfigError(RuntimeError):
    """Raised when a selected provider is missing mandatory configuration."""


@dataclass(frozen=True)
class Settings:
    google_api_key: str = ""
    serpapi_api_key: str = ""
    directory_provider: str = "auto"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    dataforseo_login: str = ""
    dataforseo_password: str = ""
    database_url: str = ""
    port: int = 8080
    discovery_workers: int = 4
    max_competitors: int = 10

    @property
    def dataforseo_configured(self) -> bool:
        return bool(self.dataforseo_login and self.dataforseo_password)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_api_key = os.getenv("GOOGLE_PLACES_API_KEY") or os.getenv("GOOGLE_MAPS_API_KEY", "")
    serpapi_api_key = os.getenv("SERPAPI_API_KEY", "")
    directory_provider = os.getenv("DIRECTORY_PROVIDER", "auto").strip().lower()
    openai_api_key = os.getenv("OPENAI_API_KEY", "")
    openai_model = os.getenv("OPENAI_MODEL", "gpt-4o")
    dataforseo_login = os.getenv("DATAFORSEO_LOGIN", "")
    dataforseo_password = os.getenv("DATAFORSEO_PASSWORD", "")
    database_url = os.getenv("DATABASE_URL", "")
    port = int(os.getenv("PORT") or os.getenv("WORKER_PORT") or "8080")
    discovery_workers = int(os.getenv("DISCOVERY_WORKERS", "4"))
    max_competitors = int(os.getenv("MAX_COMPETITORS", "10"))

    if directory_provider not in DIRECTORY_PROVIDERS:
        raise ConfigError(
            f"DIRECTORY_PROVIDER must be one of {sorted(DIRECTORY_PROVIDERS)}, got {directory_provider!r}"
        )
    if not google_api_key and not serpapi_api_key:
        logger.warning("No places provider key configured; the mock business directory will be used.")
    if not openai_api_key:
        logger.warning("OPENAI_API_KEY is not configured; AI insights will be skipped.")
    if not (dataforseo_login and dataforseo_password):
        logger.warning("DataForSEO credentials are not configured; SEO enrichment will be skipped.")
    if not database_url:
        logger.warning("DATABASE_URL is not set; analyses will not be persisted.")

    return Settings(
        google_api_key=google_api_key,
        serpapi_api_key=serpapi_api_key,
        directory_provider=directory_provider,
        openai_api_key=openai_api_key,
        openai_model=openai_model,
        dataforseo_login=dataforseo_login,
        dataforseo_password=dataforseo_password,
        database_url=database_url,
        port=port,
        discovery_workers=discovery_workers,
        max_competitors=max_competitors,
    )
