from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Literal

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    DATABASE_URL: str = Field(..., description="Async PostgreSQL connection string (postgresql+asyncpg://...)")

    # Auth
    SECRET_KEY: str = Field(..., description="Secret used to sign auth tokens")
    TOKEN_TTL_SECONDS: int = 2592000  # 30 days

    # Quiz Settings
    DEFAULT_QUESTION_POINTS: int = 10
    DEFAULT_PASSING_SCORE: int = 60
    MAX_QUESTIONS_PER_QUIZ: int = 100

    # Attempts
    SCORING_BASIS: Literal["live", "snapshot"] = Field(
        "live", description="Score against the current question set (live) or the key frozen at start (snapshot)"
    )
    ATTEMPT_TTL_SECONDS: int = Field(0, description="Auto-fail attempts left started this long; 0 disables")
    ATTEMPT_SWEEP_INTERVAL_SECONDS: int = 60
    ATTEMPT_SWEEP_JOB_ID: str = "attempt_sweeper"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: List[str] = ["*"]

    # Environment
    ENV: str = "production"  # development, staging, production
    DEBUG: bool = False

settings = Settings()
