"""Configuration management using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

SQLITE_URL_PREFIX = "sqlite:///"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    host: str = "127.0.0.1"
    port: int = 3000
    api_prefix: str = "/api"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Document store
    database_url: str = "sqlite:///./data/fullstack_auth.db"
    database_timeout_seconds: float = 5.0

    # JWT Configuration
    jwt_secret_key: str = "change-me-in-production-use-env-var"
    jwt_expiry_days: int = 7

    # Bcrypt work factor (higher = more secure but slower)
    # Tests use 4 for faster execution
    bcrypt_work_factor: int = 12

    # Logging
    log_level: str = "INFO"
    app_log_file: str | None = None
    error_log_file: str | None = None
    audit_log_file: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False
    )

    @property
    def database_path(self) -> str:
        """Filesystem path of the sqlite store named by ``database_url``."""
        if not self.database_url.startswith(SQLITE_URL_PREFIX):
            raise ValueError(
                f"Unsupported database_url '{self.database_url}', expected {SQLITE_URL_PREFIX}<path>"
            )
        return self.database_url[len(SQLITE_URL_PREFIX):]
