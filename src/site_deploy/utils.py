"""Utility functions for site-deploy."""

import re
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[component]} - {message}"

COMPONENT_NAME = re.compile(r"^[\w\-]*$")


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Configure loguru sinks.

    Console output goes to stderr at `level`, the optional log file receives
    everything from DEBUG up and is rotated.
    """
    logger.remove()
    logger.configure(extra={"component": "site-deploy"})
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            format=FILE_FORMAT,
            rotation="1 MB",
            retention=5,
            backtrace=True,
            diagnose=False,
        )


def sanitize_component_names(names: Iterable[str]) -> List[str]:
    """Keep only names made of letters, digits, `_` and `-`."""
    result = []
    for name in names:
        if name and COMPONENT_NAME.match(name):
            result.append(name)
        else:
            logger.bind(component="utils").warning(f"Ignoring invalid component name: {name!r}")
    return result
