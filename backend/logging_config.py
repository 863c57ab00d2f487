"""
Logging Configuration
Sets up the application loggers for the backend and route modules.
"""
import logging
import sys
from typing import Optional, Union

LOGGER_NAMESPACES = ("backend", "routes", "app")


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configure console (and optionally file) output for the app's loggers.

    Args:
        level: Logging level, either numeric or a name such as "DEBUG".
        log_file: Optional path to also write logs to.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='a', encoding='utf-8'))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    for namespace in LOGGER_NAMESPACES:
        logger = logging.getLogger(namespace)
        logger.setLevel(level)
        # Avoid duplicate output when the Flask reloader re-runs setup
        if logger.hasHandlers():
            logger.handlers.clear()
        for handler in handlers:
            logger.addHandler(handler)
        logger.propagate = False

    logging.getLogger("backend").info("Logging initialized.")
