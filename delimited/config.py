from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DELIMITED_", env_file=".env", extra="ignore")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)
    LOG_INPUTS: bool = False  # Include (truncated) rejected inputs in debug logs

    # Validation
    MAX_ERRORS: int = 50  # Per-segment cap on accumulated check failures


@lru_cache
def get_settings() -> Settings:
    return Settings()

