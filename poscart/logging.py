"""
Logging for poscart.

Every module logs through a child of the "poscart" logger:

    from poscart.logging import get_logger, describe_lines
    logger = get_logger(__name__)

    logger.debug(f"Cart saved ({describe_lines(lines)})")

The level comes from POSCART_LOG_LEVEL, falling back to LOG_LEVEL, so the
cart can be made verbose without raising the level of the host app.
Product ids and names are user-controlled; pass them through the
sanitize_* helpers before they reach a log line.
"""

import logging
import os
import sys
from functools import cache
from typing import Iterable

PACKAGE_LOGGER = "poscart"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"


def _get_log_level() -> int:
    """Level from POSCART_LOG_LEVEL, then LOG_LEVEL, else INFO."""
    level_name = os.environ.get("POSCART_LOG_LEVEL") or os.environ.get("LOG_LEVEL") or "INFO"
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _configure_package_logger() -> None:
    """Attach a stdout handler to the package logger once."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)

    if package_logger.handlers:
        return

    level = _get_log_level()
    package_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    # Deployed terminals ship logs to a collector that adds its own timestamps
    is_production = os.environ.get("POSCART_ENV", "").lower() == "production"
    handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if is_production else LOG_FORMAT))

    package_logger.addHandler(handler)

    # supabase talks through httpx, which logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


_configure_package_logger()


@cache
def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def _escape_log_injection(value: str) -> str:
    """Escape control characters that could forge log entries (CWE-117)."""
    return (
        value.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )


def sanitize_id_for_logging(id_value: str | None) -> str:
    """
    Sanitize a product ID for logging: escape control characters and keep the first 8 chars.

    Returns "N/A" for empty values.
    """
    if not id_value:
        return "N/A"
    safe_value = _escape_log_injection(str(id_value))
    return safe_value[:8] if len(safe_value) > 8 else safe_value


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """Sanitize free text (product names, stored values) for logging."""
    if value is None or value == "":
        return "N/A"
    safe_value = _escape_log_injection(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


def describe_lines(lines: Iterable) -> str:
    """Short cart size description, e.g. "2 lines, 5 units"."""
    lines = list(lines)
    units = sum(line.quantity for line in lines)
    return (
        f"{len(lines)} line{'' if len(lines) == 1 else 's'}, "
        f"{units} unit{'' if units == 1 else 's'}"
    )


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "PACKAGE_LOGGER",
    "describe_lines",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
