# COMPONENT: CENTRALIZED LOGGING CONFIGURATION
# REQUIREMENTS SATISFIED: Deterministic logging behavior, environment-controlled verbosity
"""
door_catalog/utils/logging.py

Provides the centralized logging configuration for the door catalog
service. This module configures the package logger ("door_catalog")
whose behavior is controlled via environment variables. Every other
module logs through a child logger (e.g. "door_catalog.services.doors")
so a single handler setup covers the whole service.

Environment Variables:
    LOG_LEVEL:
        0 → Silent (no logs emitted)
        1 → INFO level logging
        2 → DEBUG level logging

    LOG_FILE:
        Optional path to a log file. If provided and valid, logs are written
        to this file. Otherwise, logs fall back to standard error (stderr).

Design Decisions:
    - Logging is isolated from the root logger to prevent duplicate output
      under uvicorn, which installs its own root handlers.
    - Existing handlers are cleared on setup so repeated calls (app
      factory in tests, module reloads) never stack handlers.
"""
import os
import sys
import logging

LOGGER_NAME = "door_catalog"


def setup_logger():
    """
    Configures and returns the package logger based on LOG_FILE and
    LOG_LEVEL environment variables.
    """
    log_file = os.environ.get("LOG_FILE")
    try:
        # LOG_LEVEL=0 is silent, 1 is INFO, 2 is DEBUG
        log_level_env = int(os.environ.get("LOG_LEVEL", "1"))
    except ValueError:
        log_level_env = 1

    logger = logging.getLogger(LOGGER_NAME)

    # Prevent logs from being propagated to the root logger
    logger.propagate = False

    if log_level_env == 1:
        logger.setLevel(logging.INFO)
    elif log_level_env >= 2:
        logger.setLevel(logging.DEBUG)
    else:
        # For LOG_LEVEL=0, set a level that will not log anything
        logger.setLevel(logging.CRITICAL + 1)

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = None
    if log_file and log_level_env > 0:
        try:
            handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError:
            # Invalid path, fall back to console
            handler = logging.StreamHandler(sys.stderr)
    elif log_level_env > 0:
        handler = logging.StreamHandler(sys.stderr)

    if handler:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger under the package logger, e.g. get_logger("doors_router")."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


# Create a single logger instance that can be imported by other files
logger = setup_logger()
