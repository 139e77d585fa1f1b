"""
Logging configuration for the Receipt Print Service.

Print jobs run on worker threads and forced releases run on their own
threads, so every line carries the thread name.

Log Format:
    2026-10-19 10:15:30 [INFO    ] [MainThread] receipt_print_service.app - Starting
    2026-10-19 10:15:31 [INFO    ] [job-1a2b3c4d] receipt_print_service.orchestrator - Job completed

Usage:
    # At application startup
    from receipt_print_service.logging_config import setup_logging
    setup_logging('DEBUG')

    # In modules
    logger = logging.getLogger(__name__)
"""

import logging
import sys
from typing import Union

PACKAGE_LOGGER = 'receipt_print_service'

LOG_FORMAT = '%(asctime)s [%(levelname)-8s] [%(threadName)s] %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(log_level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Configure the package logger with a console handler.

    Safe to call more than once; existing handlers are replaced.

    Args:
        log_level: Level name ('DEBUG', 'INFO', ...) or numeric level

    Returns:
        The configured package logger
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    logger.debug('Logging configured at level %s', logging.getLevelName(log_level))
    return logger
