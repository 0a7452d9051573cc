"""
Structured logging setup for the rocket tracker.

Provides consistent key/value logging across the filter, tracker and
telemetry modules, with optional file output for post-flight review.

Usage:
    from utils.logger import setup_logger, get_logger

    # Initialize once at startup, before calibration
    setup_logger()

    # Get logger in any module
    logger = get_logger(__name__)
    logger.info("Launchpad altitude estimated", altitude=201.4)
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import structlog
from structlog.typing import Processor

from config.settings import get_settings


def setup_logger(
    log_level: Optional[str] = None,
    log_to_file: Optional[bool] = None,
    log_directory: Optional[str] = None,
) -> Optional[Path]:
    """
    Initialize the logging system.

    Uses settings from config if parameters are not explicitly provided.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        log_to_file: Override whether to log to file
        log_directory: Override directory for log files

    Returns:
        Path of the log file, or None when file logging is disabled
    """
    settings = get_settings()

    level = log_level or settings.logging.log_level
    to_file = log_to_file if log_to_file is not None else settings.logging.log_to_file
    log_dir = log_directory or settings.logging.log_directory

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        stream=sys.stdout,
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(numeric_level)

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # Call site is only worth the overhead while debugging the filter
    if numeric_level == logging.DEBUG:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )

    if sys.stdout.isatty():
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    else:
        # JSON for flight logs parsed after recovery
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        # stdlib loggers so records also reach the file handler
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if to_file:
        return _setup_file_logging(log_dir, numeric_level)
    return None


def _setup_file_logging(log_directory: str, level: int) -> Path:
    """
    Add a timestamped log file handler to the root logger.

    Args:
        log_directory: Directory to store log files
        level: Logging level

    Returns:
        Path of the created log file
    """
    log_path = Path(log_directory)
    log_path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_path / f"rocket_tracker_{timestamp}.log"

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    logging.getLogger().addHandler(file_handler)
    return log_file


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance for the given module name.

    Args:
        name: Module name (typically __name__)

    Returns:
        BoundLogger instance for structured logging

    Example:
        logger = get_logger(__name__)
        logger.info("Sensors profiled", baro_variance=0.04)
        logger.warning("Non-finite state estimate", altitude=float("nan"))
    """
    return structlog.get_logger(name)
