"""Application configuration with environment validation.

Usage:
    from shuttlehub.config import get_settings

    settings = get_settings()
    print(settings.storage_backend)
    print(settings.grace_period_hours)

Environment files:
    - .env in the current directory, or in the project root

Storage backends:
    - memory   - process-local, nothing persisted (tests, demos)
    - local    - JSON document file at DATA_FILE (default)
    - supabase - remote tables, requires SUPABASE_URL and SUPABASE_KEY
"""

from decimal import Decimal
from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_env_file() -> Path | None:
    """Find .env file, checking both current dir and project root."""
    if Path(".env").exists():
        return Path(".env")
    # config.py -> shuttlehub -> src -> project_root
    project_root = Path(__file__).parent.parent.parent
    env_file = project_root / ".env"
    if env_file.exists():
        return env_file
    return None


class Environment(StrEnum):
    """Application environment."""

    LOCAL = "local"
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class LogFormat(StrEnum):
    """Log output format."""

    CONSOLE = "console"
    JSON = "json"


class StorageBackend(StrEnum):
    """Where sessions and locations are persisted."""

    MEMORY = "memory"
    LOCAL = "local"
    SUPABASE = "supabase"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=_find_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Environment = Environment.LOCAL

    # Storage
    storage_backend: StorageBackend = Field(
        default=StorageBackend.LOCAL, description="Persistence backend"
    )
    data_file: Path = Field(
        default=Path.home() / ".shuttlehub" / "data.json",
        description="JSON document file used by the local backend",
    )

    # Supabase (only needed for the supabase backend)
    supabase_url: str | None = Field(default=None, description="Supabase project URL")
    supabase_key: SecretStr | None = Field(default=None, description="Supabase API key")
    sessions_table: str = Field(default="sessions", description="Sessions table name")
    locations_table: str = Field(default="locations", description="Locations table name")

    # Anthropic (optional - only needed for the smart advisor)
    anthropic_api_key: SecretStr | None = Field(
        default=None, description="Anthropic API key for session advice"
    )
    advisor_model: str = Field(default="claude-sonnet-4-20250514", description="Advisor model")

    # Session rules
    grace_period_hours: float = Field(
        default=4.0, ge=0, description="Hours a finished session stays in the active view"
    )
    default_max_participants: int = Field(default=8, ge=1)
    currency: str = Field(default="RM", description="Currency label used for display")
    default_shuttle_price: Decimal = Field(default=Decimal("10.58"), ge=0)

    # Static club credentials
    admin_username: str = "admin"
    admin_password: SecretStr = SecretStr("admin123")
    member_username: str = "user"
    member_password: SecretStr = SecretStr("user123")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: LogFormat | None = Field(
        default=None, description="Log output format (default: json in production, else console)"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload, clear the cache:
        get_settings.cache_clear()

    Returns:
        Application settings
    """
    return Settings()
