"""Logging configuration."""

import sys

from loguru import logger

from settings import APP_NAME, LOG_DIR, LOG_LEVEL

DELIVERY_MODULES = ("app.services.notification", "mail_client")


def _delivery_only(record) -> bool:
    return record["name"].startswith(DELIVERY_MODULES)


def setup_logging(level: str = LOG_LEVEL, to_file: bool = True):
    """Console sink at `level`; with `to_file`, a daily debug log plus a
    separate warnings log for mail delivery problems (bounces, failed sends)."""
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <cyan>{name}</cyan> | <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            LOG_DIR / "boardvote_{time:YYYY-MM-DD}.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="00:00",
            retention="14 days",
            compression="gz",
        )
        logger.add(
            LOG_DIR / "delivery_{time:YYYY-MM}.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}",
            level="WARNING",
            filter=_delivery_only,
            rotation="10 MB",
            retention="90 days",
        )
        logger.info("{}: logging to {} (console level {})", APP_NAME, LOG_DIR, level)

    return logger
