# tasktracker/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

PACKAGE_LOGGER = "tasktracker"


def setup_logging(level: str | int = logging.INFO, log_dir: str | Path | None = None) -> None:
    """
    Configure the package logger:
    - Console handler on stderr
    - File handler (tasktracker.log) only when log_dir is given

    Safe to call more than once; handlers are installed a single time.
    Records still propagate to the root logger so test capture keeps working.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    if getattr(logger, "_tasktracker_configured", False):
        return

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / "tasktracker.log"), encoding="utf-8")
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    # SQL echo stays off unless asked for
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger._tasktracker_configured = True
