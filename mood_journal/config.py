# mood journal configuration
# loads env vars for mongodb, session jwt, gemini, oauth providers

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# load .env from project root
load_dotenv(Path(__file__).parent.parent / ".env")


class Settings(BaseSettings):
    # runtime
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # mongodb
    MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "mood_journal")

    # session jwt
    JWT_SECRET: str = os.getenv("JWT_SECRET", "mood-journal-dev-secret-change-in-production")
    JWT_ALGORITHM: str = "HS256"
    SESSION_TOKEN_EXPIRE_DAYS: int = 7
    SESSION_COOKIE_NAME: str = "token"
    DISPLAY_NAME_COOKIE_NAME: str = "display_name"
    DISPLAY_NAME_COOKIE_MAX_AGE_DAYS: int = 30

    # gemini (titles, emotion emoji, feedback, emotion analysis)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

    # oauth providers
    GOOGLE_CLIENT_ID: str = os.getenv("GOOGLE_CLIENT_ID", "")
    OAUTH_HTTP_TIMEOUT: float = 10.0

    # cors
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")
    ALLOWED_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
