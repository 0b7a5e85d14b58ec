from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# .env file sits at the project root (parent of src/)
# Only use if it exists (CI uses environment variables directly)
# Path: core/config.py -> goatherd -> src -> project root -> .env
_ENV_FILE = Path(__file__).parent.parent.parent.parent / ".env"
_ENV_FILE = _ENV_FILE if _ENV_FILE.exists() else None

DEFAULT_SNAPSHOT_FILE = "herd.json"


@lru_cache
def get_cache_dir() -> Path:
    """Get the cache directory (.cache/ in workspace root).

    Looks for project root by finding .git or pyproject.toml,
    then returns .cache/ within that root.
    """
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / ".git").exists() or (parent / "pyproject.toml").exists():
            cache_dir = parent / ".cache"
            cache_dir.mkdir(exist_ok=True)
            return cache_dir
    # Fallback to current working directory
    cache_dir = Path.cwd() / ".cache"
    cache_dir.mkdir(exist_ok=True)
    return cache_dir


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_prefix="GOATHERD_",
        extra="ignore",
    )

    # Herd snapshot exported by the sync layer (JSON)
    # If not set, the CLI falls back to .cache/herd.json
    snapshot_path: Path | None = None

    # Display units for CLI output ("metric" = kg, "imperial" = lb)
    # Note: all records and analytics stay in kg internally
    display_units: Literal["metric", "imperial"] = "metric"

    # Level handed to logging.basicConfig by the CLI
    log_level: str = "WARNING"


def get_snapshot_path() -> Path:
    """Resolve the herd snapshot file, preferring the configured path."""
    if settings.snapshot_path is not None:
        return settings.snapshot_path
    return get_cache_dir() / DEFAULT_SNAPSHOT_FILE


settings = Settings()
