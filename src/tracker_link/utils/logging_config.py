"""
Logging setup for tracker linking.

All modules log through the 'tracker_link' logger; applications call
setup_logger() once to attach console and, optionally, rotating file output.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


def setup_logger(name: str = 'tracker_link', level: Union[int, str] = logging.INFO,
                 log_file: Optional[str] = None, max_bytes: int = 10 * 1024 * 1024,
                 backup_count: int = 5) -> logging.Logger:
    """
    Configure and return a logger.

    Args:
        name: Logger name
        level: Logging level for the console handler
        log_file: Optional path of a rotating log file, written at DEBUG level
        max_bytes: Size at which the log file is rotated
        backup_count: Number of rotated log files to keep

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate output when called more than once
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
