"""Logging bootstrap for the tasklab CLI.

Library modules only create `logging.getLogger(__name__)` loggers; handler
wiring happens here and nowhere else.
"""

from __future__ import annotations

import logging
import os

_HANDLER_NAME = "tasklab-stderr"


def _parse_level(raw: str | None) -> int:
    normalized = str(raw or "INFO").strip().upper()
    level = getattr(logging, normalized, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def configure(level: str | None = None) -> int:
    """Attach a single stderr handler to the `tasklab` logger.

    The level comes from `level`, else `TASKLAB_LOG_LEVEL`, else INFO.
    Calling this again only updates the level. Returns the resolved level.
    """

    resolved = _parse_level(level or os.environ.get("TASKLAB_LOG_LEVEL"))
    root = logging.getLogger("tasklab")
    root.setLevel(resolved)

    handler = next((h for h in root.handlers if h.get_name() == _HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
        root.addHandler(handler)
    handler.setLevel(resolved)
    return resolved
