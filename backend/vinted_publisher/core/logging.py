"""Logging setup shared by the HTTP service and the command line publisher."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send ``vinted_publisher.*`` records to stdout at ``level``."""
    root = logging.getLogger("vinted_publisher")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_vinted_publisher", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._vinted_publisher = True
        root.addHandler(handler)
