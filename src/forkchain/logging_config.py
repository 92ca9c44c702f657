"""
Logging Configuration
Sets up the 'forkchain' logger namespace for the application.
"""
import logging
import sys
from typing import Optional

from forkchain.config import get_log_file, get_log_level

LOGGER_NAMESPACE = "forkchain"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: Optional[int] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the logger for the 'forkchain' namespace.

    Args:
        level: Logging level. Defaults to FORKCHAIN_LOG_LEVEL or INFO.
        log_file: Optional path to save logs to. Defaults to FORKCHAIN_LOG_FILE.

    Returns:
        The configured namespace logger.
    """
    if level is None:
        level = get_log_level()
    if log_file is None:
        log_file = get_log_file()

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(level)

    # Calling twice (e.g. from tests) must not duplicate output
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("Logging initialized.")
    return logger
