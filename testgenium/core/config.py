# testgenium/core/config.py
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Locate the .env file relative to the project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(ENV_FILE), extra="ignore")

    # Application
    PROJECT_NAME: str = "TestGenium"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Security
    JWT_SECRET_KEY: str = "dev-jwt-secret-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./testgenium.db"
    DB_ECHO: bool = False

    # CORS
    BACKEND_CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    # Assessment engine
    ASSESSMENT_ENGINE: str = "stub"
    ENGINE_TIMEOUT_SECONDS: float = 60.0
    STUB_ENGINE_DELAY_SECONDS: float = 5.0

    # Job dispatch: "inline" runs engines on the API event loop, "celery" hands them to workers
    JOB_DISPATCH_BACKEND: str = "inline"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"

    # Progress heuristic: how long a run of each depth is expected to take
    EXPECTED_DURATION_SECONDS: Dict[str, float] = {
        "basic": 30.0,
        "standard": 60.0,
        "deep": 180.0,
    }

    # History pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
