from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="ClaimFix API", alias="APP_NAME")
    app_env: str = Field(default="local", alias="APP_ENV")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_redaction_enabled: bool = Field(default=True, alias="LOG_REDACTION_ENABLED")

    correction_schema_dir: str = Field(default="config/schemas", alias="CORRECTION_SCHEMA_DIR")
    schema_validation_enabled: bool = Field(default=True, alias="SCHEMA_VALIDATION_ENABLED")

    pattern_dir: str = Field(default="config/patterns", alias="PATTERN_DIR")
    active_pattern_set: str = Field(default="default", alias="ACTIVE_PATTERN_SET")
    phone_min_digits: int = Field(default=10, alias="PHONE_MIN_DIGITS")

    context_sample_width: float = Field(default=200.0, alias="CONTEXT_SAMPLE_WIDTH")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
