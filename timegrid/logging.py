import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_INITIALIZED = False


def configure_logging(debug: bool = False, *, stream: Optional[object] = None) -> None:
    """Attach a single stderr handler to the root logger."""

    global _INITIALIZED
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    if _INITIALIZED:
        return

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    _INITIALIZED = True
    logging.getLogger(__name__).debug("Logging configured (debug=%s)", debug)


__all__ = ["configure_logging", "LOG_FORMAT"]
