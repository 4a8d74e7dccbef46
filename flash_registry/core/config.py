"""Application configuration using Pydantic settings"""

from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5000
    DEBUG: bool = False

    # Database (schema only, the registry itself is in-memory)
    DATABASE_URL: str = "sqlite:///./sense360.db"

    # Registry
    PUBLIC_ID_LENGTH: int = Field(12, ge=8)
    ACCESS_LOG_DEFAULT_LIMIT: int = 100

    # Security
    ADMIN_API_KEY: str = "CHANGE-ME-IN-PRODUCTION"

    # API Configuration
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Sense360 Flash Device Registry"
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:5000"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
