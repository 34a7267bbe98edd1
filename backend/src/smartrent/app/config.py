"""SmartRent settings, read from the environment and backend/.env."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

# backend/.env, independent of the working directory
_ENV_FILE = Path(__file__).resolve().parents[3] / ".env"


class Settings(BaseSettings):
    """Process-wide configuration. Field names map to upper-case env vars."""

    # Storage
    database_url: str = "sqlite+aiosqlite:///./smartrent.db"

    # Local session tokens
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiration_minutes: int = 1440

    # Firebase ID tokens; leave the project id empty to accept local tokens only
    firebase_project_id: str = ""
    firebase_service_account_path: str = ""

    # Comma-separated list of web client origins
    cors_origins: str = "http://localhost:3000"

    # Expiry sweep cadence
    lease_expiry_interval_hours: float = 24

    debug: bool = True

    model_config = {"env_file": str(_ENV_FILE), "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def firebase_enabled(self) -> bool:
        return bool(self.firebase_project_id)

    @property
    def cors_origins_list(self) -> list[str]:
        """Allowed CORS origins. Debug builds accept any origin."""
        if self.debug:
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
