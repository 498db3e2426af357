"""
Logging for shift-market.

Every module logs through `get_logger(name)`, which hangs off a single
`shift_market` logger writing to stdout. The starting level comes from
LOG_LEVEL; the service applies `SearchConfig.log_level` with set_level().
"""
import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _root_logger(level: str) -> logging.Logger:
    root = logging.getLogger("shift_market")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
    # uvicorn installs its own handlers on the root logger
    root.propagate = False
    return root


logger = _root_logger(os.getenv("LOG_LEVEL", "INFO").upper())


def set_level(level: str) -> None:
    """Change the level of every shift_market logger, e.g. 'DEBUG'."""
    logger.setLevel(level.upper())


def get_logger(name: str = None) -> logging.Logger:
    """Logger for one module: `get_logger("search.session")` -> `shift_market.search.session`."""
    if name:
        return logging.getLogger(f"shift_market.{name}")
    return logger
