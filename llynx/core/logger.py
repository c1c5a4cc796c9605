"""
Logging setup shared across the application.
"""

import logging
import sys
from typing import Optional

from llynx.core.config import get_settings

_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def setup_logger(name: str = "llynx", level: Optional[str] = None) -> logging.Logger:
    """
    Get a logger writing to stdout with the application format.

    Handlers are attached once per logger name, so repeated calls are cheap.
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        log.addHandler(handler)
        log.propagate = False
    log.setLevel((level or get_settings().LOG_LEVEL).upper())
    return log


logger = setup_logger()
