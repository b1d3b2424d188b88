"""Loguru sink configuration shared by the CLI and the web app."""

import sys

from loguru import logger

from caredigest.config import LOG_LEVEL


def configure_logging(level: str = None) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or LOG_LEVEL).upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>"
        " | {message}",
    )
    logger.disable("urllib3")
