# weekly_report/config.py
from pydantic_settings import BaseSettings
from typing import Optional
from pydantic import Field
from fastapi import Request

class Settings(BaseSettings):
    DATABASE_URL: str = Field("sqlite+aiosqlite:///./weekly_report.db")
    SQL_ECHO: bool = Field(False)

    # Set to false for stores that cannot run delete+insert in one transaction.
    ATOMIC_SAVES: bool = Field(True)

    # External database that /projects/import copies projects from.
    IMPORT_DATABASE_URL: Optional[str] = None

    LOG_LEVEL: str = Field("INFO")

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        return async_database_url(self.DATABASE_URL)

    @property
    def effective_import_database_url(self) -> Optional[str]:
        if not self.IMPORT_DATABASE_URL:
            return None
        return async_database_url(self.IMPORT_DATABASE_URL)


def async_database_url(url: str) -> str:
    # Ensure asyncpg is used
    if url.startswith("postgresql://") and "+asyncpg" not in url:
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://") and "+aiosqlite" not in url:
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url

settings = Settings()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
