"""Logging configuration for boardsync."""

import logging
import sys
from datetime import UTC, datetime

from .config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that log every request at INFO/DEBUG.
CHATTY_LOGGERS = ("httpx", "httpcore")


def setup_logging(settings: Settings) -> logging.Logger | None:
    """Configure the ``boardsync`` logger from settings.

    Nothing is configured unless ``verbose`` is set or a log file is given;
    stderr output would interleave with the TUI, so it is opt-in. HTTP client
    request logging is only let through at ``-vvv``.

    Returns:
        The configured logger, or None when logging stays off.
    """
    verbose, log_file = settings.verbose, settings.log_file
    if verbose == 0 and log_file is None:
        return None

    level = logging.DEBUG if verbose >= 2 else logging.INFO
    logger = logging.getLogger("boardsync")
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = []
    if verbose > 0:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose >= 3 else logging.WARNING)

    remote = "local only" if settings.local_only else settings.api_base_url
    logger.info(
        "boardsync starting | %s | level=%s",
        datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S UTC"),
        logging.getLevelName(level),
    )
    logger.info("data dir: %s | remote: %s", settings.data_dir, remote)
    return logger
