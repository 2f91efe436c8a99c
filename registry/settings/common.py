# Standard library imports
from typing import Annotated, Any, Literal

# Third-party imports
from pydantic import AnyUrl, BeforeValidator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class CommonSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # General settings
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["dev", "staging", "production"] = "dev"
    DEBUG_MODE: bool = False
    PROJECT_NAME: str = "Resident Registry"

    # CORS settings
    BACKEND_CORS_ORIGINS: Annotated[list[AnyUrl] | str, BeforeValidator(parse_cors)] = [
        AnyUrl("http://localhost/"),
        AnyUrl("http://localhost:3000/"),
        AnyUrl("http://localhost:5173/"),
    ]

    @computed_field  # type: ignore[prop-decorator, misc]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Optional settings
    SENTRY_DSN: str | None = None

    # Redis settings
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: float = 5.0

    # Key layout
    RESIDENT_KEY_PREFIX: str = "resident"
    RESIDENTS_SET_KEY: str = "residents"
    STATS_KEY: str = "stats"

    # Counter maintenance
    RECONCILE_ON_COUNTER_FAILURE: bool = True
    RECONCILE_INTERVAL_MINUTES: int = 15

    # Celery settings
    CELERY_BROKER_URL: str = "redis://redis:6379/2"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/3"
    CELERY_WORKER_CONCURRENCY: int = 4
    CELERY_TASK_TIME_LIMIT: int = 300  # 5 minutes
    CELERY_TASK_SOFT_TIME_LIMIT: int = 240  # 4 minutes
