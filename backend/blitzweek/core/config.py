from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Application
    PROJECT_NAME: str = "ScaleUp Blitz Week Registration API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Database
    DATABASE_URL: str = "sqlite:///./blitzweek.db"

    # CORS
    ALLOWED_ORIGINS: list = [
        "https://theblitzweek.com",
        "https://www.theblitzweek.com",
        "https://blitzweek.vercel.app",
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Security (admin routes)
    SECRET_KEY: str = "change-me-blitzweek-admin-signing-key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ADMIN_EMAIL: str = "admin@iitb.ac.in"
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_AUTH_ENABLED: bool = True

    # Registration rules
    INSTITUTE_EMAIL_DOMAIN: str = "iitb.ac.in"
    REGISTRATION_NUMBER_PREFIX: str = "BW"
    REGISTRATION_NUMBER_MAX_ATTEMPTS: int = 5

    # Listing / statistics
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 500
    RECENT_REGISTRATIONS_LIMIT: int = 10
    TREND_DAYS: int = 7

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = "app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

settings = Settings()
