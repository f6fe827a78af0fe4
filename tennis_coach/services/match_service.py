"""
In-memory match sessions for the HTTP surface. Each session owns one
MatchOrchestrator (state, RNG, history) and the instruction candidates
offered for the pending opportunity. Nothing is persisted: sessions vanish
with the process, and the oldest are evicted past `max_sessions`.

Every read or mutation of a session's match goes through its lock, so
concurrent requests on one match are applied one at a time.
"""
from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from tennis_coach.config import MAX_SESSIONS
from tennis_coach.instructions import generate_instruction_choices, get_instruction
from tennis_coach.simulation.autoplay import AutoPlayConfig, AutoPlayer, AutoPlayMode, AutoPlayOutcome
from tennis_coach.simulation.errors import InvalidInstructionError, MatchStateError
from tennis_coach.simulation.orchestrator import MatchOrchestrator, initialize_match
from tennis_coach.simulation.profiles import Player
from tennis_coach.simulation.rng import SeededRNG
from tennis_coach.simulation.schemas import (
    CoachInstruction,
    InterventionAck,
    InterventionOpportunity,
    MatchConfig,
    MatchResult,
    PointResult,
)
from tennis_coach.simulation.summary import summarize_match

logger = logging.getLogger(__name__)

# Offsets from the match seed for the streams that must not shadow point draws.
CHOICE_SEED_OFFSET = 1
PLAYER_SEED_OFFSET = 2


def derived_rng(seed: int | None, offset: int) -> SeededRNG:
    return SeededRNG(None if seed is None else seed + offset)


# ---------- Exceptions ----------


class MatchNotFoundError(ValueError):
    """No session with that match id."""


# ---------- Session ----------


@dataclass
class MatchSession:
    id: str
    orchestrator: MatchOrchestrator
    choice_rng: SeededRNG  # separate stream so browsing choices never shifts point draws
    seed: int | None = None
    choices: list[CoachInstruction] = field(default_factory=list)
    # Reentrant: intervene() asks choices() for the offered list while holding it.
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def state(self):
        return self.orchestrator.state

    def to_dict(self) -> dict:
        d = self.state.to_dict()
        d["match_id"] = self.id
        d["seed"] = self.seed
        d["points_played"] = len(self.orchestrator.history)
        return d


class MatchSessionStore:
    """
    Thread-safe registry of live sessions keyed by match id.
    The registry lock guards the session map; each session's own lock guards
    its match.
    """

    def __init__(self, max_sessions: int = MAX_SESSIONS) -> None:
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, MatchSession] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self,
        home: Player,
        away: Player,
        config: MatchConfig | None = None,
        seed: int | None = None,
    ) -> MatchSession:
        state = initialize_match(home, away, config)
        match_id = str(uuid.uuid4())
        session = MatchSession(
            id=match_id,
            orchestrator=MatchOrchestrator(state, seed=seed),
            choice_rng=derived_rng(seed, CHOICE_SEED_OFFSET),
            seed=seed,
        )
        with self._lock:
            self._sessions[match_id] = session
            while len(self._sessions) > self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("Evicted match session %s", evicted)
        logger.info("Created match session %s (seed=%s)", match_id, seed)
        return session

    def get(self, match_id: str) -> MatchSession:
        with self._lock:
            session = self._sessions.get(match_id)
        if session is None:
            raise MatchNotFoundError(f"Match not found: {match_id}")
        return session

    @contextmanager
    def locked(self, match_id: str) -> Iterator[MatchSession]:
        """Hold the session's lock for the duration of the block."""
        session = self.get(match_id)
        with session.lock:
            yield session

    def delete(self, match_id: str) -> None:
        with self._lock:
            if self._sessions.pop(match_id, None) is None:
                raise MatchNotFoundError(f"Match not found: {match_id}")

    def advance(self, match_id: str, max_points: int = 1) -> list[PointResult | InterventionOpportunity]:
        """
        Play up to max_points points. Stops early at match end or when an
        opportunity is raised (the opportunity is the last item returned).
        """
        out: list[PointResult | InterventionOpportunity] = []
        with self.locked(match_id) as session:
            for _ in range(max_points):
                if session.state.is_match_complete:
                    break
                outcome = session.orchestrator.advance()
                out.append(outcome)
                if isinstance(outcome, InterventionOpportunity):
                    session.choices = []
                    break
        return out

    def autoplay(
        self,
        match_id: str,
        mode: AutoPlayMode,
        max_points: int | None = None,
    ) -> tuple[list[PointResult], AutoPlayOutcome]:
        """Fast-forward without pacing. Refused while an intervention is pending."""
        with self.locked(match_id) as session:
            if session.state.pending_opportunity is not None:
                raise MatchStateError("An intervention is pending; resolve it before auto-play")
            player = AutoPlayer(session.orchestrator, AutoPlayConfig(mode=mode, fast_forward=True))
            played = list(player.points(max_points))
            session.choices = []
        return played, player.outcome

    def choices(self, match_id: str) -> list[CoachInstruction]:
        """Candidates for the pending opportunity; generated once per opportunity."""
        with self.locked(match_id) as session:
            opportunity = session.state.pending_opportunity
            if opportunity is None:
                return []
            if not session.choices:
                session.choices = generate_instruction_choices(
                    opportunity,
                    session.state.used_instructions,
                    session.choice_rng,
                    session.state.config.instruction_choices,
                )
            return list(session.choices)

    def intervene(self, match_id: str, instruction_id: str | None) -> InterventionAck:
        """Apply one of the offered instructions, or skip when instruction_id is None."""
        with self.locked(match_id) as session:
            if instruction_id is None:
                ack = session.orchestrator.resolve(None)
            else:
                instruction = get_instruction(instruction_id)
                if instruction is None:
                    raise InvalidInstructionError(f"Unknown instruction: {instruction_id}")
                offered = {c.id for c in self.choices(match_id)}
                if session.state.pending_opportunity is not None and instruction.id not in offered:
                    raise InvalidInstructionError(f"Instruction {instruction_id} was not offered for this opportunity")
                ack = session.orchestrator.resolve(instruction)
            session.choices = []
        return ack

    def summary(self, match_id: str) -> MatchResult:
        with self.locked(match_id) as session:
            return summarize_match(session.state, session.orchestrator.history)
