from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: str = "sqlite:///./tasks.db"
    DB_ECHO: bool = False

    # JWT settings
    SECRET_KEY: str = "your-super-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    # Tokens live for seven days; there is no refresh flow
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    CLIENT_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Diagnostics
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Project settings
    PROJECT_NAME: str = "Task Tracker API"
    API_PREFIX: str = "/api"

    model_config = SettingsConfigDict(
        env_file=".env",
        # Variables in .env that aren't defined here are simply ignored.
        extra="ignore",
    )

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CLIENT_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
