"""
Configuration settings for the Visnet E-Learning API.

Uses Pydantic settings management for environment variables and configuration.
"""

from typing import Annotated, Optional, List
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import field_validator
import json
import secrets


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    # API Settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Visnet E-Learning API"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Course catalog, enrollment, progress tracking and moderation API"
    ENVIRONMENT: str = "development"
    PORT: int = 3000

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    BCRYPT_ROUNDS: int = 12

    # Database: either a full URL or discrete connection settings
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "visnet_elearning_dev"
    DB_USER: str = "visnet_user"
    DB_PASSWORD: str = "visnet_password"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30  # seconds

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = ["http://localhost:4200"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str] | str:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    # Registration
    ALLOW_ADMIN_REGISTRATION: bool = False

    # Admin settings
    FIRST_ADMIN_EMAIL: str = "admin@visnet-elearning.com"
    FIRST_ADMIN_PASSWORD: str = "admin123"
    FIRST_ADMIN_FIRST_NAME: str = "Platform"
    FIRST_ADMIN_LAST_NAME: str = "Admin"

    # Catalog settings
    DEFAULT_CATEGORIES: List[str] = [
        "Web Development",
        "Data Science",
        "Design",
        "Business",
    ]
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Development settings
    DEBUG: bool = False
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @property
    def sqlalchemy_database_uri(self) -> str:
        """Get the database URL, assembling it from DB_* settings if needed."""
        if self.DATABASE_URL:
            # Hosted providers hand out plain postgres:// URLs
            if self.DATABASE_URL.startswith("postgres://"):
                return self.DATABASE_URL.replace("postgres://", "postgresql+psycopg2://", 1)
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


# Create global settings instance
settings = Settings()
