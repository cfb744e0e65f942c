"""Centralized configuration for impact-tree.

This module is the single source of truth for all configuration.
It loads the .env file once and exposes settings lazily.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


DEFAULT_ENTRY = "src/main.tsx"
DEFAULT_MAX_WORKERS = 8
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration values."""
    entry: str = DEFAULT_ENTRY
    root: str = field(default_factory=lambda: str(Path.cwd()))
    max_workers: int = DEFAULT_MAX_WORKERS
    ignore_patterns: tuple = ()
    log_level: str = DEFAULT_LOG_LEVEL


_CACHED_SETTINGS: Settings | None = None


def _find_env_file(start: Path) -> Path | None:
    """Find a .env file by searching upward from ``start``.

    Returns:
        Path to the .env file, or None if not found within 5 levels
    """
    current = start.resolve()

    for _ in range(5):
        if (current / ".env").exists():
            return current / ".env"
        if current.parent == current:
            break
        current = current.parent

    return None


def _parse_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


def _load_settings() -> Settings:
    """Load configuration from .env file and environment."""
    env_path = _find_env_file(Path.cwd())

    if env_path:
        load_dotenv(env_path)
    else:
        # Try loading from environment anyway
        load_dotenv()

    ignore_env = os.environ.get("IMPACT_TREE_IGNORE", "")
    patterns = tuple(p.strip() for p in ignore_env.split(",") if p.strip())

    return Settings(
        entry=os.environ.get("IMPACT_TREE_ENTRY") or DEFAULT_ENTRY,
        root=os.environ.get("IMPACT_TREE_ROOT") or str(Path.cwd()),
        max_workers=_parse_int("IMPACT_TREE_MAX_WORKERS", DEFAULT_MAX_WORKERS),
        ignore_patterns=patterns,
        log_level=(os.environ.get("IMPACT_TREE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )


def get_settings() -> Settings:
    """Get settings, loading once and caching."""
    global _CACHED_SETTINGS
    if _CACHED_SETTINGS is None:
        _CACHED_SETTINGS = _load_settings()
    return _CACHED_SETTINGS


def reset_settings():
    """Drop cached settings so the next call re-reads the environment."""
    global _CACHED_SETTINGS
    _CACHED_SETTINGS = None
