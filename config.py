from dataclasses import dataclass, field
from dotenv import load_dotenv
import os


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    db_name: str = "events.db"
    # Legacy behaviour: get_popular_events() reorders the live catalog.
    popular_sort_in_place: bool = True
    popular_limit: int = 10
    upcoming_window_days: int = 7
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build Settings from the environment (and a .env file, if present)."""
    load_dotenv()
    origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    return Settings(
        db_name=os.getenv("EVENTS_DB", "events.db"),
        popular_sort_in_place=_env_flag("POPULAR_SORT_IN_PLACE", "true"),
        popular_limit=int(os.getenv("POPULAR_LIMIT", "10")),
        upcoming_window_days=int(os.getenv("UPCOMING_WINDOW_DAYS", "7")),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
