"""Logging-related utilities.

Library modules only create loggers; handlers are installed by the command
line entry point through :func:`setup_logging`.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(
    log_file: Optional[Union[str, Path]] = None,
    verbose: bool = False,
) -> Optional[str]:
    """Configure the root logger for command line use.

    Logs go to stdout, and additionally to *log_file* when given. An existing
    logging configuration (e.g. when embedded in another tool) is left alone
    apart from the extra file handler. Returns the log file path, if any.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger()

    if not root.handlers:
        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)],
        )
    else:
        root.setLevel(min(root.level, level) if root.level else level)

    if log_file is None:
        return None

    log_path = Path(log_file).expanduser()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), mode="a", encoding="utf-8")
    except OSError as e:
        logging.getLogger(__name__).warning("Could not open log file %s: %s", log_path, e)
        return None
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(fh)
    return str(log_path)
