from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    This class loads configuration values used throughout the application from
    environment variables. Since Docker Compose automatically loads the .env file
    from the project root, there's no need to explicitly specify the file path.
    """

    # Database and credential encryption
    DATABASE_URL: str = "sqlite:///./prdraft.db"
    ENCRYPTION_KEY: str = ""  # Master secret for per-user credential keys
    KDF_ITERATIONS: int = 10000
    CREDENTIAL_TTL_DAYS: int = 182  # Stored credentials expire after ~6 months

    # GitHub OAuth app and REST API
    GITHUB_CLIENT_ID: str = ""
    GITHUB_CLIENT_SECRET: str = ""
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_OAUTH_URL: str = "https://github.com/login/oauth"
    OAUTH_REDIRECT_URL: str = "http://localhost:8000/auth/callback"
    REQUEST_TIMEOUT: float = 30.0

    # Session cookie
    SESSION_SECRET: str = "change-me"
    SESSION_MAX_AGE: int = 24 * 60 * 60  # 1 day
    SESSION_HTTPS_ONLY: bool = True  # Disable only for local http development

    # Gemini text generation
    GEMINI_API_KEY: str = ""  # Used when the user has not stored their own key
    GEMINI_MODELS: List[str] = ["gemini-2.5-flash", "gemini-2.5-flash-lite"]
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_OUTPUT_TOKENS: int = 8192
    PATCH_PREVIEW_CHARS: int = 1000

    # Development and debugging
    DEBUG: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
