"""
Configuration settings for the application
"""

import os
from typing import List, Optional
from pydantic_settings import BaseSettings

def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")

class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./event_tracker.db")

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    ENFORCE_HTTPS: bool = _env_flag(
        "ENFORCE_HTTPS",
        "true" if os.getenv("ENVIRONMENT", "development") == "production" else "false"
    )
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Security
    # When unset, event management routes are open (login is client-driven)
    ADMIN_TOKEN: Optional[str] = os.getenv("ADMIN_TOKEN")

    # Admin account provisioned on first startup
    DEFAULT_ADMIN_USERNAME: str = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
    DEFAULT_ADMIN_PASSWORD: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "ChangeMe2025!")
    DEFAULT_ADMIN_NAME: str = os.getenv("DEFAULT_ADMIN_NAME", "Administrator")

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    class Config:
        env_file = ".env"

settings = Settings()
