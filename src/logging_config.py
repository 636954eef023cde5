"""Process logging setup.

Every module logs through ``logging.getLogger(__name__)``; this only wires
a single stream handler onto the root logger.
"""

from __future__ import annotations

import logging

_HANDLER_NAME = "sales-donated-stream"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the stream handler once and set the root level.

    An unknown level name falls back to INFO rather than failing startup.
    """
    root = logging.getLogger()
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        root.setLevel(logging.INFO)
        logging.getLogger(__name__).warning("Unknown LOG_LEVEL %r; using INFO", level)
    else:
        root.setLevel(resolved)

    if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(handler)
