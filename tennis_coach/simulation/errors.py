"""
Caller errors raised by the simulation core. None of these are retried;
the match state is left untouched when one is raised.
"""
from __future__ import annotations


class MatchStateError(ValueError):
    """Operation not valid in the current match state (finished match, pending decision)."""


class InvalidInstructionError(ValueError):
    """Instruction cannot be used here (already used, unmet situation requirement, no budget)."""


class MatchConfigError(ValueError):
    """MatchConfig values out of range."""
