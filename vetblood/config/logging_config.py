"""Logging configuration for the registry."""
import logging
import sys
from typing import Optional

from vetblood.config.settings import Settings, settings

APP_LOGGER = "vetblood"


def resolve_level(debug: Optional[bool] = None, app_settings: Optional[Settings] = None) -> int:
    """
    Pick the package log level.

    An explicit debug flag wins, then LOG_LEVEL, then the DEBUG setting.
    """
    app_settings = app_settings or settings
    if debug is not None:
        return logging.DEBUG if debug else logging.INFO
    if app_settings.LOG_LEVEL:
        level = logging.getLevelName(app_settings.LOG_LEVEL)
        if isinstance(level, int):
            return level
    return logging.DEBUG if app_settings.DEBUG else logging.INFO


def setup_logging(debug: Optional[bool] = None, app_settings: Optional[Settings] = None) -> int:
    """
    Configure stdout logging for the registry.

    Args:
        debug: Force debug (True) or info (False) level
        app_settings: Settings to read the level, format and quiet loggers from

    Returns:
        The level applied to the vetblood logger
    """
    app_settings = app_settings or settings
    log_level = resolve_level(debug, app_settings)

    logging.basicConfig(
        level=log_level,
        format=app_settings.LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for logger_name in app_settings.QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(APP_LOGGER).setLevel(log_level)
    logging.getLogger(__name__).info(f"Logging configured with level: {logging.getLevelName(log_level)}")
    return log_level
