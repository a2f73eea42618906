import os

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _bool(name: str, default: bool) -> bool:
    """
    Helper to parse boolean environment variables.
    Accepts: 1, true, yes, on (case-insensitive).
    """
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


def _norm_db_url(url: str | None) -> str | None:
    """
    Normalize database URL to a synchronous SQLAlchemy driver.

    ``postgres://`` becomes ``postgresql+psycopg://`` and async drivers
    (``aiosqlite``, ``asyncpg``) are swapped for their sync counterparts,
    since the store is written from the synchronous commit path.
    """
    if not url:
        return None
    if url.startswith("postgres://"):
        url = "postgresql+psycopg://" + url[len("postgres://") :]
    if url.startswith("postgresql+asyncpg://"):
        url = "postgresql+psycopg://" + url[len("postgresql+asyncpg://") :]
    if url.startswith("sqlite+aiosqlite://"):
        url = "sqlite://" + url[len("sqlite+aiosqlite://") :]
    return url


class EngineRules(BaseModel):
    """Economy constants for the scoring engine."""

    model_config = ConfigDict(frozen=True)

    exchange_rate: int = 10  # 10 MGP = 1 FP
    base_complete_fp: int = 20
    base_partial_fp: int = 10
    prestige_ratio: float = 0.8
    luteal_multiplier: float = 1.25
    streak_buffer_hours: float = 48
    grace_cap: int = 2
    max_set_score: float = 15
    default_set_score: float = 8.0
    exercise_base_mgp: float = 15
    points_per_extra_level: int = 1000
    log_limit: int = 100
    bmi_height_m: float = 1.60
    streak_milestones: dict[int, int] = Field(
        default_factory=lambda: {4: 50, 8: 100, 12: 200, 20: 450, 50: 1500}
    )


class Config(BaseSettings):
    """
    Application configuration loaded from environment variables.
    Uses pydantic for validation and parsing.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = Field("sqlite:///lifehub.db", description="Database URL")
    LOG_LEVEL: str = Field("INFO", description="Root log level")

    REPLICATION_URL: str | None = Field(None, description="Base URL of the backup service")
    REPLICATION_TOKEN: str | None = Field(None, description="Bearer token for the backup service")
    REPLICATION_COLLECTION: str = Field("LifeHub_Backups", description="Backup collection")
    REPLICATION_DOCUMENT: str = Field("Sister_Data", description="Backup document id")
    REPLICATION_TIMEOUT: float = Field(5.0, description="Backup request timeout in seconds")

    RULES: EngineRules = Field(default_factory=EngineRules, description="Engine economy rules")

    # Feature flags
    FF_REPLICATION: bool = Field(
        default_factory=lambda: _bool("FF_REPLICATION", True),
        description="Remote backup feature flag",
    )

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            raise ValueError("DATABASE_URL must not be empty")
        return _norm_db_url(v)


SETTINGS = Config()  # pyright: ignore[reportCallIssue]
