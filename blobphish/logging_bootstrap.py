"""Logging setup for the blobphish namespace.

- level from ``-verbose`` or the LOG_LEVEL environment variable
- stderr handler, plus a rotating file when a log file is configured
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_LEVEL = "WARNING"


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure the root logger; calling again replaces the handlers."""
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, os.getenv("LOG_LEVEL", DEFAULT_LEVEL).upper(), logging.WARNING)

    if log_file is None:
        log_file = os.getenv("BLOBPHISH_LOG_FILE") or None

    formatter = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        # 5MB x 3
        file_handler = RotatingFileHandler(str(path), maxBytes=5 * 1024 * 1024, backupCount=3)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logging.getLogger("blobphish").setLevel(level)
    if level > logging.DEBUG:
        logging.getLogger("filelock").setLevel(logging.WARNING)
        logging.getLogger("tldextract").setLevel(logging.WARNING)
