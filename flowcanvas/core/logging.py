"""
Logging Configuration
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from flowcanvas.core.config import Settings, get_settings


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure package-wide logging"""
    settings = settings or get_settings()

    handlers: list = [logging.StreamHandler(sys.stdout)]

    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """Get logger for a specific module"""
    return logging.getLogger(name)
