from datetime import timedelta
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    # DEV defaults: override through PORTAL_* environment variables in production.
    DATABASE_URL: str = f"sqlite:///{BASE_DIR}/portal.db"

    SECRET_KEY: str = "change-me-in-production"
    TOKEN_MINUTES: int = 60

    # shared secret required to self-register an admin account
    ADMIN_SECRET: str = "change-me-admin-secret"

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

DATABASE_URL = settings.DATABASE_URL

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE = timedelta(minutes=settings.TOKEN_MINUTES)

ADMIN_SECRET = settings.ADMIN_SECRET

# Assessment defaults
DEFAULT_TIME_LIMIT_MINUTES = 60
DEFAULT_MAX_POINTS = 10

# Grading bounds
MIN_GRADE = 0
MAX_GRADE = 100
