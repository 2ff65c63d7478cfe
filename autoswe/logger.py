"""Logging for autoswe: a quiet console plus a rotating run log."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

__all__ = ["PACKAGE_LOGGER", "setup_logging", "get_logger"]

PACKAGE_LOGGER = "autoswe"
DEFAULT_LOG_FILE = Path("~/.autoswe/logs/agent.log").expanduser()
CONSOLE_FORMAT = "[%(levelname).1s] %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

# litellm logs every request at INFO under two spellings
NOISY_LOGGERS = ("litellm", "LiteLLM", "httpx")

LogTarget = Union[str, Path, bool, None]


def setup_logging(verbose: bool = False, log_file: LogTarget = None,
                  name: str = PACKAGE_LOGGER) -> logging.Logger:
    """Attach handlers to the package logger, replacing any from an earlier call.

    The console shows WARNING and above (INFO with ``verbose``). The run log
    always records INFO so each round of a run can be traced afterwards, and
    DEBUG with ``verbose``. ``log_file=False`` turns the run log off; ``None``
    writes to ``~/.autoswe/logs/agent.log``.
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    console = logging.StreamHandler()
    console.setLevel(logging.INFO if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    path = _log_path(log_file)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        run_log = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES,
                                      backupCount=LOG_BACKUP_COUNT, encoding="utf-8")
        run_log.setLevel(logging.DEBUG if verbose else logging.INFO)
        run_log.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(run_log)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _log_path(log_file: LogTarget) -> Optional[Path]:
    if log_file is False:
        return None
    if log_file is None or log_file is True:
        return DEFAULT_LOG_FILE
    return Path(log_file).expanduser()
