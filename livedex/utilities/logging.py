"""Logging setup for Livedex.

Call setup_logging() once at startup (the API lifespan does). Modules log
through logging.getLogger(__name__) with a [TAG] prefix; feed code logs
through feed_logger() so every record knows which feed it belongs to.

Handlers:
    console              LOG_LEVEL and up
    livedex.log          DEBUG and up, rotating
    livedex_errors.log   ERROR and up
    livedex_feeds.log    feed traffic only, DEBUG and up (FEED_LOG_ENABLED)

The OCR feeds deliver several frames per second. Their per-frame DEBUG
lines go to the feed log and the main log; the console only sees them when
LOG_LEVEL is DEBUG.

Record context:
    feed                 "route" / "battle", "-" outside feed code
    catalog_generation   CatalogStore generation the record was resolved against
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from livedex.core.types import FeedKind

_configured = False

NO_FEED = "-"

# Loggers whose records belong in the feed log even without a feed stamp
FEED_LOGGER_PREFIXES: tuple[str, ...] = ("livedex.feeds", "livedex.services.live_context")

# Third-party loggers that trace every socket frame or HTTP request
QUIET_LOGGERS: tuple[str, ...] = ("websocket", "httpx", "httpcore", "uvicorn.access")

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(feed)-6s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_BYTES = 10 * 1024 * 1024


# =============================================================================
# RECORD CONTEXT
# =============================================================================


class FeedContextFilter(logging.Filter):
    """Gives every record the feed context fields the formatters print."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "feed", None):
            record.feed = NO_FEED
        if not hasattr(record, "catalog_generation"):
            record.catalog_generation = None
        return True


class FeedTrafficFilter(logging.Filter):
    """Passes only records from feed code (stamped, or from a feed logger)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "feed", NO_FEED) != NO_FEED:
            return True
        return record.name.startswith(FEED_LOGGER_PREFIXES)


class FeedLoggerAdapter(logging.LoggerAdapter):
    """Stamps records with a feed name; per-call ``extra`` is merged in."""

    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def feed_logger(name: str, kind: FeedKind | str) -> FeedLoggerAdapter:
    """Logger for one feed.

    Usage:
        log = feed_logger(__name__, FeedKind.ROUTE)
        log.debug("[ROUTE] No map for '%s'", text, extra={"catalog_generation": 3})
    """
    feed = kind.value if isinstance(kind, FeedKind) else str(kind)
    return FeedLoggerAdapter(logging.getLogger(name), {"feed": feed})


# =============================================================================
# FORMATTERS
# =============================================================================


class JSONFormatter(logging.Formatter):
    """One JSON object per line; feed context only when present."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }

        feed = getattr(record, "feed", NO_FEED)
        if feed != NO_FEED:
            log_data["feed"] = feed
        generation = getattr(record, "catalog_generation", None)
        if generation is not None:
            log_data["catalog_generation"] = generation

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _formatter(use_json: bool) -> logging.Formatter:
    if use_json:
        return JSONFormatter()
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT)


# =============================================================================
# HANDLERS
# =============================================================================


def _rotating(path: Path, level: int, backups: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=backups,
        encoding="utf-8",
        delay=True,
    )
    handler.setLevel(level)
    return handler


def build_handlers(
    level: int,
    log_dir: Path,
    use_json: bool = False,
    feed_log: bool = True,
) -> list[logging.Handler]:
    """Console and file handlers, each carrying the feed context filter.

    Files are opened on first write.
    """
    handlers: list[logging.Handler] = []

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    handlers.append(console)

    handlers.append(_rotating(log_dir / "livedex.log", logging.DEBUG, backups=5))
    handlers.append(_rotating(log_dir / "livedex_errors.log", logging.ERROR, backups=3))

    if feed_log:
        feeds = _rotating(log_dir / "livedex_feeds.log", logging.DEBUG, backups=2)
        feeds.addFilter(FeedTrafficFilter())
        handlers.append(feeds)

    formatter = _formatter(use_json)
    for handler in handlers:
        handler.addFilter(FeedContextFilter())
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    log_level: str | None = None,
    log_dir: str | Path | None = None,
    use_json: bool | None = None,
    feed_log: bool | None = None,
) -> None:
    """Configure the root logger from Config. Later calls are no-ops.

    Args:
        log_level: Override Config.LOG_LEVEL
        log_dir: Override Config.LOG_DIR
        use_json: Override Config.LOG_FORMAT (True for JSON lines)
        feed_log: Override Config.FEED_LOG_ENABLED
    """
    global _configured
    if _configured:
        return

    from livedex.config import VERSION, Config

    level_name = (log_level or Config.LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.INFO)
    log_path = Path(log_dir or Config.LOG_DIR)
    if use_json is None:
        use_json = Config.LOG_FORMAT.lower() == "json"
    if feed_log is None:
        feed_log = Config.FEED_LOG_ENABLED

    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()
    for handler in build_handlers(level, log_path, use_json=use_json, feed_log=feed_log):
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True

    logger = logging.getLogger("livedex")
    logger.info("[STARTUP] Livedex %s", VERSION)
    logger.info("[STARTUP] Route feed: %s", Config.ROUTE_FEED_URL if Config.ROUTE_FEED_ENABLED else "disabled")
    logger.info("[STARTUP] Battle feed: %s", Config.BATTLE_FEED_URL if Config.BATTLE_FEED_ENABLED else "disabled")
    logger.info("[STARTUP] Catalog: %s", Config.CATALOG_PATH)
    logger.info(
        "[STARTUP] Logs: %s (level %s, %s%s)",
        log_path,
        logging.getLevelName(level),
        "JSON" if use_json else "text",
        ", feed log" if feed_log else "",
    )
