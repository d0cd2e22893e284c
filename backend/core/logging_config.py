"""
Logging Configuration

Loguru sinks for the console and a rotating log file, plus one bound
logger per component so records show where they came from.
"""

import sys
from pathlib import Path

from loguru import logger

from config import get_settings

settings = get_settings()

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[name]}</magenta> | <cyan>{module}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]} | {module}:{line} - {message}"

logger.remove()
logger.configure(extra={"name": "app"})

logger.add(sys.stderr, format=CONSOLE_FORMAT, level=settings.log_level, colorize=True)

if settings.log_dir:
    logger.add(
        str(Path(settings.log_dir) / "dashboard_{time:YYYY-MM-DD}.log"),
        format=FILE_FORMAT,
        level=settings.log_level,
        rotation="10 MB",
        retention="7 days",
        enqueue=True,
    )


def get_logger(name: str):
    """Logger tagged with a component name."""
    return logger.bind(name=name)


upload_logger = get_logger("upload")
data_logger = get_logger("data")
dashboard_logger = get_logger("dashboard")
llm_logger = get_logger("llm")
cache_logger = get_logger("cache")
