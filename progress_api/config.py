# progress_api/config.py
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

DATA_DIR = Path(__file__).resolve().parent / "data"

DEFAULT_DATABASE_URL = f"sqlite:///{DATA_DIR / 'progress.db'}"
DEFAULT_USER_ID = "test-user"
DEFAULT_COMPLETION_THRESHOLD = 9.0
DEFAULT_CORS_ORIGINS = ["http://localhost:5173"]


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() == "true"


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once at startup and handed to the app."""

    offline_mode: bool = False
    database_url: str = DEFAULT_DATABASE_URL
    default_user_id: str = DEFAULT_USER_ID
    completion_threshold: float = DEFAULT_COMPLETION_THRESHOLD
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def mode(self) -> str:
        return "offline" if self.offline_mode else "online"


def load_settings() -> Settings:
    return Settings(
        offline_mode=_env_flag("OFFLINE_MODE"),
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        default_user_id=os.getenv("DEFAULT_USER_ID", DEFAULT_USER_ID).strip() or DEFAULT_USER_ID,
        completion_threshold=_env_float("COMPLETION_THRESHOLD", DEFAULT_COMPLETION_THRESHOLD),
        cors_origins=_env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("LOG_FILE") or None,
    )
