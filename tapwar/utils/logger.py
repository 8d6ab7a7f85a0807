import logging
import sys
from datetime import datetime
from pathlib import Path

from tapwar.config import Config

PACKAGE_LOGGER = 'tapwar'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _attach_handlers(logger: logging.Logger):
    level = logging.DEBUG if Config.DEBUG else logging.INFO
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    stdout = logging.StreamHandler(sys.stdout)
    stdout.setLevel(level)
    stdout.setFormatter(formatter)
    logger.addHandler(stdout)

    # Daily file, always at DEBUG
    log_dir = Path(Config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    daily = logging.FileHandler(
        log_dir / f'tapwar_bot_{datetime.now():%Y%m%d}.log',
        encoding='utf-8'
    )
    daily.setLevel(logging.DEBUG)
    daily.setFormatter(formatter)
    logger.addHandler(daily)


def setup_logger(name: str) -> logging.Logger:
    """
    Get a logger that writes to stdout and the daily log file.

    Handlers live on the package logger, so modules that simply call
    logging.getLogger(__name__) share the same output.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        _attach_handlers(package_logger)

    logger = logging.getLogger(name)
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + '.') and not logger.handlers:
        _attach_handlers(logger)
    return logger
