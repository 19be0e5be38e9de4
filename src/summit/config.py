from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from summit.models import UserContext

DATA_HOME = Path.home() / ".local" / "share" / "summit"


class Settings(BaseSettings):
    """Application settings read from SUMMIT_* environment variables or .env."""

    model_config = SettingsConfigDict(
        env_prefix="SUMMIT_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    supabase_url: str | None = Field(
        default=None,
        description="Base URL of the managed backend, e.g. https://xyz.supabase.co.",
    )
    supabase_anon_key: str | None = Field(
        default=None,
        description="Public anon key sent as the apikey header.",
    )
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    db_path: Path = Field(default=DATA_HOME / "summit.db")
    local_user_id: str = Field(default="local-user", min_length=1)
    local_user_email: str = Field(default="participante@local")

    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=DATA_HOME / "summit.log")

    @property
    def backend(self) -> str:
        """'rest' when the managed backend is configured, else 'local'."""
        if self.supabase_url and self.supabase_anon_key:
            return "rest"
        return "local"


def local_user(settings: Settings) -> UserContext:
    """The fixed user used against the local sqlite store."""
    return UserContext(user_id=settings.local_user_id, email=settings.local_user_email)
