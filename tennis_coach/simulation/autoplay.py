"""
Auto-play driver: runs the point loop on behalf of a presentation layer.
Separates simulation from pacing; points can be emitted with a delay or
fast-forwarded. Three modes:

  normal           play on, asking the decision callback at each opportunity
  to_intervention  stop as soon as an opportunity is raised (left pending)
  to_end           play to the end, skipping every opportunity

A decision callback that returns None or exceeds `decision_timeout` counts
as a skip. cancel() stops the loop between points.

The callback receives a snapshot of the match state taken when the
opportunity was raised, never the live state: a callback that outlives its
timeout keeps reading that snapshot while the match plays on without it.
"""
from __future__ import annotations

import asyncio
import copy
import logging
import threading
from contextlib import nullcontext
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Iterator

from .orchestrator import DecisionFn, MatchOrchestrator
from .schemas import CoachInstruction, InterventionOpportunity, PointResult
from .state_tracker import MatchState

logger = logging.getLogger(__name__)

AsyncDecisionFn = Callable[[MatchState, InterventionOpportunity], Awaitable["CoachInstruction | None"]]


class AutoPlayMode(str, Enum):
    NORMAL = "normal"
    TO_INTERVENTION = "to_intervention"
    TO_END = "to_end"


class StopReason(str, Enum):
    COMPLETED = "completed"
    INTERVENTION = "intervention"
    CANCELLED = "cancelled"
    MAX_POINTS = "max_points"


@dataclass
class AutoPlayConfig:
    """Pacing and decision handling."""
    mode: AutoPlayMode = AutoPlayMode.NORMAL
    seconds_per_point: float = 0.0
    decision_timeout: float | None = None  # None = wait for the decision indefinitely
    fast_forward: bool = False  # if True, never sleep between points


@dataclass
class AutoPlayOutcome:
    reason: StopReason
    points_played: int
    opportunity: InterventionOpportunity | None = None  # set when stopped at an intervention


def _point_delay(config: AutoPlayConfig) -> float:
    if config.fast_forward:
        return 0.0
    return max(0.0, config.seconds_per_point)


class AutoPlayer:
    """
    Blocking auto-play loop over a MatchOrchestrator. Safe to cancel() from
    another thread; a pending delay is interrupted immediately.
    """

    def __init__(
        self,
        orchestrator: MatchOrchestrator,
        config: AutoPlayConfig | None = None,
        decide: DecisionFn | None = None,
        on_point: Callable[[PointResult], None] | None = None,
        on_opportunity: Callable[[InterventionOpportunity], None] | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.config = config or AutoPlayConfig()
        self.decide = decide
        self.on_point = on_point
        self.on_opportunity = on_opportunity
        self._cancel = threading.Event()
        self.outcome: AutoPlayOutcome | None = None

    def cancel(self) -> None:
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def _ask(self, opportunity: InterventionOpportunity) -> CoachInstruction | None:
        if self.decide is None or self.config.mode == AutoPlayMode.TO_END:
            return None
        state = copy.deepcopy(self.orchestrator.state)
        if self.config.decision_timeout is None:
            return self.decide(state, opportunity)
        pool = ThreadPoolExecutor(max_workers=1)
        try:
            return pool.submit(self.decide, state, opportunity).result(timeout=self.config.decision_timeout)
        except FutureTimeout:
            logger.info("Decision timed out after %.1fs; skipping", self.config.decision_timeout)
            return None
        finally:
            pool.shutdown(wait=False)

    def points(self, max_points: int | None = None) -> Iterator[PointResult]:
        """Yield each played point until the match ends, the loop is cancelled or it stops at an intervention."""
        self.outcome = AutoPlayOutcome(StopReason.COMPLETED, 0)
        state = self.orchestrator.state
        played = 0
        while not state.is_match_complete:
            if self.cancelled:
                self.outcome = AutoPlayOutcome(StopReason.CANCELLED, played)
                return
            if max_points is not None and played >= max_points:
                self.outcome = AutoPlayOutcome(StopReason.MAX_POINTS, played)
                return
            result = self.orchestrator.advance()
            if isinstance(result, InterventionOpportunity):
                if self.on_opportunity:
                    self.on_opportunity(result)
                if self.config.mode == AutoPlayMode.TO_INTERVENTION:
                    self.outcome = AutoPlayOutcome(StopReason.INTERVENTION, played, result)
                    return
                self.orchestrator.resolve(self._ask(result))
                continue
            played += 1
            if self.on_point:
                self.on_point(result)
            yield result
            delay = _point_delay(self.config)
            if delay > 0 and not state.is_match_complete:
                self._cancel.wait(delay)
        self.outcome = AutoPlayOutcome(StopReason.COMPLETED, played)

    def run(self, max_points: int | None = None) -> AutoPlayOutcome:
        for _ in self.points(max_points):
            pass
        return self.outcome


async def async_auto_play(
    orchestrator: MatchOrchestrator,
    config: AutoPlayConfig | None = None,
    decide: AsyncDecisionFn | None = None,
    cancel: asyncio.Event | None = None,
    lock: threading.RLock | None = None,
) -> AsyncIterator[PointResult | InterventionOpportunity]:
    """
    Async generator for WebSocket or other async consumers. Yields every
    PointResult and every opportunity raised; in to_intervention mode the
    opportunity is the last item and stays pending.

    If `lock` is given, each advance and resolve runs while holding it. It is
    released before every yield and await.
    """
    cfg = config or AutoPlayConfig()
    guard = lock if lock is not None else nullcontext()
    state = orchestrator.state
    while True:
        if cancel is not None and cancel.is_set():
            return
        with guard:
            if state.is_match_complete:
                return
            result = orchestrator.advance()
            opportunity = isinstance(result, InterventionOpportunity)
            snapshot = copy.deepcopy(state) if opportunity and decide is not None else None
        if opportunity:
            yield result
            if cfg.mode == AutoPlayMode.TO_INTERVENTION:
                return
            choice = None
            if decide is not None and cfg.mode == AutoPlayMode.NORMAL:
                try:
                    choice = await asyncio.wait_for(decide(snapshot, result), timeout=cfg.decision_timeout)
                except asyncio.TimeoutError:
                    logger.info("Decision timed out after %.1fs; skipping", cfg.decision_timeout)
            with guard:
                orchestrator.resolve(choice)
            continue
        yield result
        delay = _point_delay(cfg)
        if delay > 0 and not state.is_match_complete:
            await asyncio.sleep(delay)
