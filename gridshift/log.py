"""Logging setup.

Every module logs through ``logging.getLogger(__name__)``. The game keeps a
per-run ``debug.log`` next to the package that is cleared on startup.
"""

from __future__ import annotations

import logging
from pathlib import Path

DEBUG_LOG_PATH = Path(__file__).resolve().parent.parent / "debug.log"

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(
    path: Path | str | None = DEBUG_LOG_PATH,
    *,
    verbose: bool = False,
) -> logging.Logger:
    """Configure the ``gridshift`` logger. Safe to call more than once."""
    root = logging.getLogger("gridshift")
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_FORMAT)
    if path is not None:
        try:
            # mode "w" clears the debug log each run
            file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
        except OSError as e:
            logging.getLogger(__name__).warning("Could not open debug log %s: %s", path, e)
        else:
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.DEBUG)
            root.addHandler(file_handler)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    stream.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.addHandler(stream)
    return root
