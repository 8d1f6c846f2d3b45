"""
Logging configuration for RiskSizer.

Console output is compact and coloured; the optional file log is plain text
with one calculation per line so it can be grepped later.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


LEVEL_TAGS = {
    "TRACE": "TRCE",
    "DEBUG": "DBUG",
    "INFO": "INFO",
    "SUCCESS": "SUCC",
    "WARNING": "WARN",
    "ERROR": "ERR!",
    "CRITICAL": "CRIT",
}


def _short_module(name: str) -> str:
    """risksizer.core.sizing -> sizing"""
    return name.rsplit(".", 1)[-1]


def format_console(record: dict) -> str:
    """
    Console formatter.

    Format: HH:MM:SS [LEVEL] module  message
    """
    tag = LEVEL_TAGS.get(record["level"].name, "INFO")
    module = _short_module(record["name"] or "")[:12].ljust(12)
    line = f"<green>{{time:HH:mm:ss}}</green> <level>[{tag}]</level> <dim>{module}</dim> {{message}}\n"
    if record["exception"]:
        line += "{exception}"
    return line


def format_file(record: dict) -> str:
    """
    Plain formatter for file output.

    Format: YYYY-MM-DD HH:MM:SS | LEVEL | module:function:line - message
    """
    tag = LEVEL_TAGS.get(record["level"].name, "INFO")
    return (
        "{time:YYYY-MM-DD HH:mm:ss} | "
        f"{tag: <4} | "
        "{name}:{function}:{line} - {message}\n{exception}"
    )


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    log_retention_days: int = 7,
) -> None:
    """
    Configure loguru.

    Args:
        level: Minimum console log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for the rotating file log; None disables it
        log_retention_days: Days to keep old log files
    """
    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        level=level.upper(),
        format=format_console,
        colorize=True,
        backtrace=False,
        diagnose=False,
    )

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "risksizer_{time:YYYY-MM-DD}.log",
            level="DEBUG",
            format=format_file,
            rotation="00:00",
            retention=f"{log_retention_days} days",
            compression="gz",
        )

    logger.debug(f"Logging initialized: {level} level, file log {'on' if log_dir else 'off'}")
