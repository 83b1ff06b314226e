import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

_BACKEND_DIR = Path(__file__).resolve().parent.parent


def _default_alias_table_path() -> str:
    return str(_BACKEND_DIR / "policies" / "team_aliases.v1.json")


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    """Integer from env; malformed or out-of-range values fall back to default."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value >= minimum else default


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        return default
    return value if value >= minimum else default


def _env_month(name: str) -> Optional[int]:
    value = _env_int(name, 0)
    return value if 1 <= value <= 12 else None


@dataclass
class Settings:
    """Application settings loaded from environment variables with safe defaults."""

    app_name: str = "Fixture Reconciler"
    env: str = "dev"
    database_url: str = "sqlite+aiosqlite:///./fixtures.db"
    log_level: str = "INFO"
    alias_table_path: str = ""  # set from from_env
    import_workers: int = 4
    import_retry_attempts: int = 3
    import_retry_backoff_seconds: float = 0.2
    reports_dir: str = "reports"
    season_start_month: Optional[int] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        return cls(
            app_name=os.getenv("APP_NAME", cls.app_name),
            env=os.getenv("ENV", cls.env),
            database_url=os.getenv("DATABASE_URL") or cls.database_url,
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            alias_table_path=os.getenv("ALIAS_TABLE_PATH") or _default_alias_table_path(),
            import_workers=_env_int("IMPORT_WORKERS", cls.import_workers, minimum=1),
            import_retry_attempts=_env_int("IMPORT_RETRY_ATTEMPTS", cls.import_retry_attempts, minimum=1),
            import_retry_backoff_seconds=_env_float(
                "IMPORT_RETRY_BACKOFF_SECONDS", cls.import_retry_backoff_seconds
            ),
            reports_dir=os.getenv("REPORTS_DIR", cls.reports_dir),
            season_start_month=_env_month("SEASON_START_MONTH"),
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings.from_env()
