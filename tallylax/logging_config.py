"""Logging setup for the TallyLax tracker and its command line tool."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    console_level: Optional[int] = None,
) -> logging.Logger:
    """
    Configure the ``tallylax`` logger.

    Stat edits are logged at DEBUG, locks and imports at INFO, and rejected
    mutations or failed saves at WARNING. The file handler keeps everything
    at ``level``; the console handler can be quieter through
    ``console_level`` so the CLI output stays readable.

    Args:
        log_dir: Directory for log files (default: ./logs)
        level: Logging level (default: INFO)
        log_to_file: Whether to write a timestamped log file (default: True)
        log_to_console: Whether to log to stderr (default: True)
        console_level: Level for the console handler (default: same as level)

    Returns:
        Configured logger instance

    Example:
        from tallylax.logging_config import setup_logging
        logger = setup_logging(log_to_file=False)
        logger.info("Tracker ready")
    """
    logger = logging.getLogger('tallylax')
    logger.setLevel(level)

    # Drop handlers from a previous call
    logger.handlers = []

    if log_to_file:
        if log_dir is None:
            log_dir = Path('logs')
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f'tallylax_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
        )
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(console_level if console_level is not None else level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str = 'tallylax') -> logging.Logger:
    """
    Get a logger in the ``tallylax`` hierarchy.

    Args:
        name: Logger name (default: 'tallylax')

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
