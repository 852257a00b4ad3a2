from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from the project root so it loads regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./interview_agenda.db"

    # JWT (tokens are issued by the CRM; we only verify them)
    secret_key: str = "change-me"
    access_token_expire_minutes: int = 15
    algorithm: str = "HS256"

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Scheduling defaults, used when a workspace config is blank or invalid
    default_timezone: str = "America/Santiago"
    default_slot_minutes: int = 30
    max_slot_minutes: int = 8 * 60
    default_location: str = "Online"
    alternatives_limit: int = 5
    alternatives_search_days: int = 14

    # Agenda listing window (days)
    agenda_default_days: int = 14
    agenda_max_days: int = 60

    # Env
    env: str = "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith(("postgresql", "postgres"))


settings = Settings()
