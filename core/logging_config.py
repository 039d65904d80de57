# core/logging_config.py
import logging
from typing import Optional

from flask import Flask

from core.config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(app: Optional[Flask] = None, level_name: Optional[str] = None) -> None:
    """Prosta konfiguracja logowania (Flask albo CLI)."""
    if level_name is None:
        level_name = app.config.get("LOG_LEVEL", Config.LOG_LEVEL) if app is not None else Config.LOG_LEVEL
    log_level = getattr(logging, level_name.upper(), logging.INFO)

    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    if app is not None:
        app.logger.setLevel(log_level)
        app.logger.info("Logging configured, level=%s", level_name)
    else:
        logging.getLogger().setLevel(log_level)
