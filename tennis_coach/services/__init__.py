"""
Service layer: in-memory match sessions behind the HTTP surface.
"""
from .match_service import MatchNotFoundError, MatchSession, MatchSessionStore

__all__ = [
    "MatchNotFoundError",
    "MatchSession",
    "MatchSessionStore",
]
