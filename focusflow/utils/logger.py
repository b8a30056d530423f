import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union


def setup_logger(
    level: str = "INFO",
    fmt: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = 10_000_000,
    backup_count: int = 5,
) -> logging.Logger:
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt)

    # Re-running setup must not stack handlers
    for handler in list(logger.handlers):
        if getattr(handler, "_focusflow", False):
            logger.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    stream_handler._focusflow = True
    logger.addHandler(stream_handler)

    if log_file:
        Path(log_file).parent.mkdir(exist_ok=True, parents=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler._focusflow = True
        logger.addHandler(file_handler)

    # Quiet down chatty libraries
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    return logger


def setup_from_settings(settings) -> logging.Logger:
    return setup_logger(
        level=settings.LOG_LEVEL,
        fmt=settings.LOG_FORMAT,
        log_file=settings.LOG_FILE,
    )
