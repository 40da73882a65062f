"""Logging configuration.

The terminal belongs to the UI, so log records only ever go to a file
(or nowhere at all when no log file is configured).
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_file: Optional[Union[str, Path]] = None, level: Union[int, str] = logging.INFO) -> None:
    """Configure the root logger once, early in startup."""
    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    if log_file is None:
        root.addHandler(logging.NullHandler())
        return

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(str(log_path), encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(fh)

    logging.captureWarnings(True)
