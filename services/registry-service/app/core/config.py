from pydantic_settings import BaseSettings
import os


class Settings(BaseSettings):
    """Application settings configuration."""

    # Application
    APP_NAME: str = "Blood Bank Registry Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite+aiosqlite:///./blood_bank.db"
    )

    # API Configuration
    API_PREFIX: str = "/api"
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Monitoring
    ENABLE_METRICS: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Startup retry for the database connection
    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_DELAY: int = 1

    # Client data layer
    CLIENT_BASE_URL: str = os.getenv("CLIENT_BASE_URL", "http://localhost:5000")
    CLIENT_TIMEOUT: float = 30.0

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
