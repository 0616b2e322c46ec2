"""
Configuration management for the user service
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """User service configuration loaded from environment variables"""

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "./logs"

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./users.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_TIMEOUT_SECONDS: int = 30

    # Token signing (paths to PEM encoded RSA keys)
    PRIVATE_KEY: str = "./keys/private.pem"
    PUBLIC_KEY: str = "./keys/public.pem"
    JWT_ALGORITHM: str = "RS256"
    TOKEN_EXPIRE_HOURS: int = 24

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )


# Global settings instance
settings = Settings()
