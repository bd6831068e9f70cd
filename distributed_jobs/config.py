import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from distributed_jobs.contracts import DEFAULT_TTL_SECONDS


class Settings(BaseSettings):
    redis_url: str = "redis://localhost:6379/0"
    namespace: str | None = None  # prefix for all keys, e.g. "myapp" -> "myapp:distributed_jobs:..."
    default_ttl: int = Field(default=DEFAULT_TTL_SECONDS, gt=0)  # in seconds
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="DISTRIBUTED_JOBS_",
        env_file=[os.getenv("ENV_FILE", ""), ".env"],
        extra="ignore",
    )
