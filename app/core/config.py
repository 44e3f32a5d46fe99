from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    PROJECT_NAME: str = "Portfolio Chatbot"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str
    DATABASE_LOGS: bool = False
    SEED_DEFAULTS: bool = True

    # Chatbot
    REPLY_PROVIDER: Literal["canned", "faq"] = "canned"
    HISTORY_DEFAULT_LIMIT: int = 50
    HISTORY_MAX_LIMIT: int = 200
    ADMIN_SESSIONS_LIMIT: int = 100

    # Admin tokens are issued by the hosting auth service, we only verify them
    AUTH_JWT_SECRET: str = ""
    AUTH_JWT_ALGORITHM: str = "HS256"
    ADMIN_ROLES: list[str] = ["admin"]

    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v):
        if not v.startswith(("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")):
            raise ValueError("Database URL must be PostgreSQL (or sqlite+aiosqlite for local runs)")
        # Plain postgresql:// would pick the sync driver
        if v.startswith("postgresql://"):
            v = v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
