from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: str = "sqlite:///./formbuilder.db"

    # Links handed out to recipients and form owners
    PUBLIC_BASE_URL: str = "http://localhost:3000"

    # Email settings
    EMAIL_ENABLED: bool = False
    EMAIL_HOST: str = "smtp.gmail.com"
    EMAIL_PORT: int = 587
    EMAIL_HOST_USER: str = ""
    EMAIL_HOST_PASSWORD: str = ""
    EMAIL_USE_TLS: bool = True
    DEFAULT_FROM_EMAIL: str = "Form Builder <noreply@formbuilder.local>"

    # Submissions
    ENFORCE_FIELD_VALIDATION: bool = False

    # API settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Form Builder API"
    CORS_ORIGINS: list = ["*"]

    # Rate limiting
    REDIS_URL: Optional[str] = None
    RATE_LIMIT_PER_MINUTE: int = 100

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings() -> Settings:
    """
    Get settings instance with caching
    Returns:
        Settings instance
    """
    return Settings()
