"""Application settings loaded from environment variables."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    fairwork_api_url: str = "https://api.fairwork.gov.au"
    fairwork_api_key: str = ""
    fairwork_environment: Literal["sandbox", "production"] = "sandbox"
    fairwork_timeout_seconds: float = 5.0
    rate_cache_ttl_seconds: float = 3600.0
    rate_cache_max_entries: int | None = 1024
    modifier_table: str = "apprentice_modifiers.yaml"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
