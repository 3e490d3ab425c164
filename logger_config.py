"""Loguru setup shared by the web app and the CLI."""

import sys

from loguru import logger

log_format = ' | '.join(
    (
        '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</>',
        '<lvl>{level:<8}</>',
        '<c>{name}:{function}:{line}</>',
        '{message}',
    )
)


def configure_logging(level="INFO", log_file=None):
    logger.remove()  # drop loguru's default stderr handler
    logger.add(sys.stderr, format=log_format, level=level)

    if log_file:
        logger.add(
            log_file,
            format=log_format,
            level=level,
            rotation='1 day',
            retention='30 days',
            compression='zip',
            enqueue=True,
        )
    return logger
