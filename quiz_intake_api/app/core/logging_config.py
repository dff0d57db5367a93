"""
Logging setup for the intake service.

``setup_logging`` attaches a console handler (and, when ``LOG_FILE`` is
set, a UTF-8 file handler) to the root logger.  Third-party loggers
that are chatty at INFO level (the HTTP client used for notifications
and the SQLAlchemy engine) are capped at WARNING so request logs stay
readable.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_QUIET_LOGGERS = ("urllib3", "sqlalchemy.engine", "sqlalchemy.pool")


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger once per process.

    Parameters
    ----------
    level : str
        Logging level name, case insensitive.  Unknown names fall back
        to ``INFO``.
    logfile : Optional[str]
        Optional path of a log file, resolved against the current
        working directory.
    """
    root = logging.getLogger()
    if root.handlers:
        # uvicorn or pytest got there first
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
