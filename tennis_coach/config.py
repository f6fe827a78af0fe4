"""
Runtime settings from the environment. Match rules live on MatchConfig;
this module only covers process-level knobs.
"""
from __future__ import annotations

import os


def _int_or_none(value: str | None) -> int | None:
    if value is None or value.strip() == "":
        return None
    return int(value)


LOG_LEVEL = os.environ.get("TENNIS_COACH_LOG_LEVEL", "INFO")
DEFAULT_SEED = _int_or_none(os.environ.get("TENNIS_COACH_SEED"))
AUTOPLAY_SECONDS_PER_POINT = float(os.environ.get("TENNIS_COACH_AUTOPLAY_DELAY", "1.0"))
CORS_ORIGINS = [
    o.strip()
    for o in os.environ.get("TENNIS_COACH_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]
MAX_SESSIONS = int(os.environ.get("TENNIS_COACH_MAX_SESSIONS", "100"))
