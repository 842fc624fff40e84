"""Loguru sink configuration for host applications."""

import sys
from typing import Optional

from loguru import logger

from api.config import Settings, get_settings


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure loguru sinks.

    Library code only emits records; the embedding application calls this
    once at startup to decide where they go.

    Args:
        settings: Settings to use (process-wide settings if not provided)
    """
    settings = settings or get_settings()

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)

    if settings.log_to_file:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(settings.log_dir / "docsplit_{time}.log"),
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            level=settings.log_level,
        )

    logger.info(f"Logging configured for {settings.app_name} v{settings.app_version}")
