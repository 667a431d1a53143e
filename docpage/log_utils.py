"""Logger setup for the docpage CLI.

Logs go to a rotating file under the platform log directory.  Set
``DOCPAGE_DEBUG=1`` for debug records and ``DOCPAGE_LOG_STDERR=1`` to mirror
them on stderr.  Library modules only call ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from platformdirs import user_log_dir

LOGGER_NAME = "docpage"
DEFAULT_LOG_PATH = Path(user_log_dir(LOGGER_NAME, appauthor=False)) / "docpage.log"


def setup_logger(path: Path | None = None, max_bytes: int = 2_000_000, backups: int = 3) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG if os.environ.get("DOCPAGE_DEBUG") == "1" else logging.INFO)
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    target = path or DEFAULT_LOG_PATH
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(target, encoding="utf-8", maxBytes=max_bytes, backupCount=backups)
    except OSError:
        logger.addHandler(logging.NullHandler())
    else:
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    if os.environ.get("DOCPAGE_LOG_STDERR") == "1":
        sh = logging.StreamHandler()
        sh.setFormatter(fmt)
        logger.addHandler(sh)
    return logger
