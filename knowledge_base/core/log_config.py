#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Logging setup shared by the API process and the maintenance scripts.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


# -----------------------------------------------------------------------------

def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the root logger.

    Calling this more than once only changes the level, so the app factory
    can be invoked repeatedly (tests do) without stacking handlers.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not any(getattr(h, "_kb_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._kb_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level)


# -----------------------------------------------------------------------------
