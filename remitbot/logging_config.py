"""
Logging Configuration
One rotating log file per layer of the assistant:

  remitbot.app       -> app.log        HTTP surface, startup/shutdown
  remitbot.nlu       -> nlu.log        classification, pattern refresh
  remitbot.dialogue  -> dialogue.log   sessions, slot transitions
  remitbot.clients   -> clients.log    recognition / classifier HTTP calls

Child loggers (e.g. ``remitbot.nlu.patterns``) land in their parent's file.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Optional, Union
from logging.handlers import RotatingFileHandler

# Overridable so tests and containers can redirect it
LOG_DIR = Path(os.getenv("REMITBOT_LOG_DIR", str(Path(__file__).parent.parent / "logs")))

LOGGER_FILES: Dict[str, str] = {
    "remitbot.app": "app.log",
    "remitbot.nlu": "nlu.log",
    "remitbot.dialogue": "dialogue.log",
    "remitbot.clients": "clients.log",
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 10MB per file, 5 backups
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5


def setup_file_logger(name: str, log_file: Path, level: int = logging.INFO) -> logging.Logger:
    """
    Attach a rotating file handler (and a warnings-only console handler)
    to ``name``. Calling it again replaces the handlers instead of stacking them.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    # Records stay in this layer's file only
    logger.propagate = False
    return logger


def setup_logging(log_dir: Optional[Union[str, Path]] = None, level: Optional[str] = None) -> None:
    """
    Set up all remitbot loggers. ``LOG_LEVEL`` applies when ``level`` is not given.
    """
    directory = Path(log_dir) if log_dir is not None else LOG_DIR
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    directory.mkdir(parents=True, exist_ok=True)
    for name, filename in LOGGER_FILES.items():
        setup_file_logger(name, directory / filename, numeric_level)

    get_logger("remitbot.app").info("Logging configured. Log files in: %s", directory)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
