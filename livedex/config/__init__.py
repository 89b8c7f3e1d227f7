"""Application configuration.

Single source of truth for all configuration values.
Loads from environment variables with .env file support.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

from livedex.core.types import FeedConfig, FeedKind

# =============================================================================
# VERSION - Read from pyproject.toml (single source of truth)
# =============================================================================


def _get_base_version() -> str:
    """Read version - prefer pyproject.toml (source of truth), fall back to installed metadata."""
    try:
        import tomllib

        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                data = tomllib.load(f)
                return data.get("project", {}).get("version", "0.0.0")
    except (OSError, KeyError, ValueError):
        pass

    # Fall back to installed package metadata (pip install without source)
    try:
        from importlib.metadata import PackageNotFoundError, version

        return version("livedex")
    except (ImportError, PackageNotFoundError):
        pass

    return "0.0.0"


VERSION = _get_base_version()

# Load .env file from project root
_PROJECT_ROOT = Path(__file__).parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"
load_dotenv(_ENV_FILE)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


class Config:
    """Application configuration singleton.

    All configuration values should be accessed through this class.
    Values are loaded from environment variables with sensible defaults.
    Feed clients never read this class directly; they receive a FeedConfig
    built by route_feed_config() / battle_feed_config().
    """

    # Static catalog (region -> map -> encounter rows), produced by ingestion tooling
    CATALOG_PATH: str = os.getenv(
        "LIVEDEX_CATALOG_PATH",
        str(_PROJECT_ROOT / "data" / "areas.json"),
    )

    # Live feeds (local OCR producer)
    ROUTE_FEED_URL: str = os.getenv("ROUTE_FEED_URL", "ws://127.0.0.1:8765/live")
    BATTLE_FEED_URL: str = os.getenv("BATTLE_FEED_URL", "ws://127.0.0.1:8765/battle")
    ROUTE_FEED_ENABLED: bool = _env_bool("ROUTE_FEED_ENABLED", True)
    BATTLE_FEED_ENABLED: bool = _env_bool("BATTLE_FEED_ENABLED", True)

    # Battle opponents change faster than maps, so the battle feed goes stale sooner
    ROUTE_STALE_SECONDS: float = _env_float("ROUTE_STALE_SECONDS", 6.0)
    BATTLE_STALE_SECONDS: float = _env_float("BATTLE_STALE_SECONDS", 2.0)
    RECONNECT_DELAY_SECONDS: float = _env_float("RECONNECT_DELAY_SECONDS", 1.5)
    HEARTBEAT_SECONDS: float = _env_float("HEARTBEAT_SECONDS", 1.0)

    # API
    API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # PokeAPI (ability/move descriptions)
    POKEAPI_BASE: str = os.getenv("POKEAPI_BASE", "https://pokeapi.co/api/v2")

    # Logging (see livedex.utilities.logging)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR: str = os.getenv("LOG_DIR", str(_PROJECT_ROOT / "logs"))
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "text")
    FEED_LOG_ENABLED: bool = _env_bool("FEED_LOG_ENABLED", True)

    @classmethod
    def route_feed_config(cls) -> FeedConfig:
        """Build the injected configuration for the route feed client."""
        return FeedConfig(
            kind=FeedKind.ROUTE,
            url=cls.ROUTE_FEED_URL,
            stale_after_seconds=cls.ROUTE_STALE_SECONDS,
            reconnect_delay_seconds=cls.RECONNECT_DELAY_SECONDS,
            enabled=cls.ROUTE_FEED_ENABLED,
        )

    @classmethod
    def battle_feed_config(cls) -> FeedConfig:
        """Build the injected configuration for the battle feed client."""
        return FeedConfig(
            kind=FeedKind.BATTLE,
            url=cls.BATTLE_FEED_URL,
            stale_after_seconds=cls.BATTLE_STALE_SECONDS,
            reconnect_delay_seconds=cls.RECONNECT_DELAY_SECONDS,
            enabled=cls.BATTLE_FEED_ENABLED,
        )

    @classmethod
    def reload(cls) -> None:
        """Reload configuration from environment.

        Useful for testing or runtime config changes.
        """
        load_dotenv(_ENV_FILE, override=True)
        cls.CATALOG_PATH = os.getenv("LIVEDEX_CATALOG_PATH", cls.CATALOG_PATH)
        cls.ROUTE_FEED_URL = os.getenv("ROUTE_FEED_URL", cls.ROUTE_FEED_URL)
        cls.BATTLE_FEED_URL = os.getenv("BATTLE_FEED_URL", cls.BATTLE_FEED_URL)
        cls.ROUTE_FEED_ENABLED = _env_bool("ROUTE_FEED_ENABLED", cls.ROUTE_FEED_ENABLED)
        cls.BATTLE_FEED_ENABLED = _env_bool("BATTLE_FEED_ENABLED", cls.BATTLE_FEED_ENABLED)
        cls.ROUTE_STALE_SECONDS = _env_float("ROUTE_STALE_SECONDS", cls.ROUTE_STALE_SECONDS)
        cls.BATTLE_STALE_SECONDS = _env_float("BATTLE_STALE_SECONDS", cls.BATTLE_STALE_SECONDS)
        cls.RECONNECT_DELAY_SECONDS = _env_float(
            "RECONNECT_DELAY_SECONDS", cls.RECONNECT_DELAY_SECONDS
        )
        cls.HEARTBEAT_SECONDS = _env_float("HEARTBEAT_SECONDS", cls.HEARTBEAT_SECONDS)
        cls.LOG_LEVEL = os.getenv("LOG_LEVEL", cls.LOG_LEVEL)
        cls.LOG_DIR = os.getenv("LOG_DIR", cls.LOG_DIR)
        cls.LOG_FORMAT = os.getenv("LOG_FORMAT", cls.LOG_FORMAT)
        cls.FEED_LOG_ENABLED = _env_bool("FEED_LOG_ENABLED", cls.FEED_LOG_ENABLED)
