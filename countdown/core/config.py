"""Configuration management for countdown."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Local Storage Configuration
    sqlite_db_path: str = Field(
        default="data/countdown.db", description="SQLite file backing the local key-value store"
    )

    # Remote Sync Configuration
    sync_provider: Literal["none", "firebase", "gist"] = Field(
        default="none", description="Remote document store used for best-effort sync"
    )

    # Firebase Realtime Database Configuration
    firebase_database_url: str | None = Field(
        default=None, description="Firebase Realtime Database URL (e.g., https://<project>.firebaseio.com)"
    )
    firebase_data_path: str = Field(default="countdown/appData", description="Database path holding the document")
    firebase_auth_token: str | None = Field(default=None, description="Database secret or ID token (optional)")

    # GitHub Gist Configuration
    github_token: str | None = Field(default=None, description="GitHub personal access token with 'gist' scope")
    github_gist_id: str | None = Field(default=None, description="Existing gist ID to sync with (optional)")
    github_api_url: str = Field(default="https://api.github.com", description="GitHub API base URL")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Countdown Configuration
    cutoff_hour: int = Field(default=17, ge=0, le=23, description="Local hour at which 'today' rolls over to tomorrow")
    timezone: str | None = Field(
        default=None, description="IANA timezone for the cutoff clock (defaults to system local)"
    )
    save_debounce_seconds: float = Field(default=1.5, gt=0, description="Quiet period before a remote save fires")
    clock_check_seconds: int = Field(default=60, gt=0, description="Interval of the periodic effective-today check")

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # API Configuration
    API_TIMEOUT_SECONDS: int = 30

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_NOT_FOUND: int = 404

    # Local storage keys (one JSON value per key)
    KEY_TARGET_DATE: str = "countdown-target-date"
    KEY_EXCLUDED_DATES: str = "countdown-excluded-dates"
    KEY_TASKS: str = "countdown-tasks"
    KEY_SCHEMA_VERSION: str = "countdown-schema-version"
    KEY_GIST_ID: str = "countdown-gist-id"

    # Gist document
    GIST_FILENAME: str = "countdown-data.json"
    GIST_DESCRIPTION: str = "Countdown app data"

    # Scheduler job IDs
    JOB_CLOCK_CHECK: str = "effective_today_check"
    JOB_CUTOFF_CROSSING: str = "effective_today_cutoff"
    JOB_REMOTE_SAVE: str = "remote_save"

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent
    TEMPLATES_DIR: Path = PROJECT_ROOT / "templates"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
