"""Logging for the ``fractalzoom`` logger tree.

Modules log through ``get_logger("<module>")`` so records carry names like
``fractalzoom.engine``. Handlers hang off the package logger only; the root
logger and third-party loggers are left alone.
"""

import logging
import logging.handlers
from typing import List, Optional

_LOGGER_NAME = "fractalzoom"

CONSOLE_FORMAT = "%(levelname)-7s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s.%(msecs)03dZ %(levelname)s %(name)s [%(module)s:%(lineno)d] - %(message)s"

def get_logger(child: Optional[str] = None) -> logging.Logger:
    if child:
        return logging.getLogger(f"{_LOGGER_NAME}.{child}")
    return logging.getLogger(_LOGGER_NAME)

def _build_handlers(console: bool, log_file: Optional[str], rotate_bytes: int,
                    rotate_count: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if console:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        handlers.append(stream)
    if log_file:
        rotating = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=rotate_bytes, backupCount=rotate_count, encoding="utf-8"
        )
        rotating.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
        handlers.append(rotating)
    return handlers

def configure_logging(
    *,
    level: int = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = "render.log",
    rotate_bytes: int = 5 * 1024 * 1024,
    rotate_count: int = 5,
) -> logging.Logger:
    """Attach console and rotating-file handlers to the package logger.

    Calling it again replaces the handlers from the previous call. Child
    loggers inherit the level and propagate into these handlers.
    """
    shutdown_logging()
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    for handler in _build_handlers(console, log_file, rotate_bytes, rotate_count):
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger

def shutdown_logging() -> None:
    logger = get_logger()
    for h in list(logger.handlers):
        h.flush()
        logger.removeHandler(h)
        h.close()
