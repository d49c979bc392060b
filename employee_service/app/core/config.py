from pydantic_settings import BaseSettings
from pydantic import Field, AliasChoices
from typing import List, Optional
from pathlib import Path
from dotenv import load_dotenv
from shared.constants import MAX_FILE_SIZE_MB

# Repository root (3 levels up from this file: employee_service/app/core/config.py)
SERVICES_ROOT = Path(__file__).parent.parent.parent.parent
ENV_FILE = SERVICES_ROOT / ".env"

if ENV_FILE.exists():
    load_dotenv(ENV_FILE)


class Settings(BaseSettings):
    """Application settings"""

    # Service info
    service_name: str = "employee"
    service_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = True
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # Database settings
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "employee_service_db"

    # Full URL override (e.g. sqlite+aiosqlite:///./employees.db for local runs and tests)
    DATABASE_URL_OVERRIDE: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL_OVERRIDE", "EMPLOYEE_DATABASE_URL")
    )

    @property
    def DATABASE_URL(self) -> str:
        """Construct async database URL"""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    # JWT settings
    jwt_secret: str = Field(
        default="change-me-in-production",
        validation_alias=AliasChoices("JWT_SECRET", "jwt_secret")
    )
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = Field(
        default=1440,
        validation_alias=AliasChoices("JWT_EXPIRY_MINUTES", "jwt_expiry_minutes")
    )

    # bcrypt work factor
    password_hash_rounds: int = Field(
        default=12,
        validation_alias=AliasChoices("PASSWORD_HASH_ROUNDS", "password_hash_rounds")
    )

    # Frontend origins allowed by CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3001"]

    # CSV import
    MAX_IMPORT_FILE_SIZE_MB: int = MAX_FILE_SIZE_MB

    class Config:
        env_file = str(ENV_FILE) if ENV_FILE.exists() else None
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
