"""
Console log setup for the API and CLI entry points. Library modules only
create loggers; handlers are attached here.
"""
from __future__ import annotations

import logging
import sys

from tennis_coach.config import LOG_LEVEL

CONSOLE_HANDLER = "tennis_coach.console"


def setup_logging(level: str | None = None) -> logging.Logger:
    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(name)-22s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))
    if not any(h.get_name() == CONSOLE_HANDLER for h in root.handlers):
        ch = logging.StreamHandler(sys.stdout)
        ch.set_name(CONSOLE_HANDLER)
        ch.setFormatter(fmt)
        root.addHandler(ch)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    return root
