"""
REST API for the coached tennis match simulator.
Thin wrappers around the session store; all match rules live in
tennis_coach.simulation. Sessions are in memory only.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from tennis_coach.abilities import get_ability, list_abilities
from tennis_coach.config import AUTOPLAY_SECONDS_PER_POINT, CORS_ORIGINS, DEFAULT_SEED
from tennis_coach.instructions import list_instructions
from tennis_coach.logging_config import setup_logging
from tennis_coach.players import calculate_player_rating, generate_random_player
from tennis_coach.services.match_service import (
    PLAYER_SEED_OFFSET,
    MatchNotFoundError,
    MatchSessionStore,
    derived_rng,
)
from tennis_coach.simulation.autoplay import AutoPlayConfig, AutoPlayMode, async_auto_play
from tennis_coach.simulation.errors import InvalidInstructionError, MatchConfigError, MatchStateError
from tennis_coach.simulation.profiles import Player, PlayerStats
from tennis_coach.simulation.schemas import InterventionOpportunity, MatchConfig

logger = logging.getLogger(__name__)

store = MatchSessionStore()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Tennis Coach API",
    description="Point-by-point tennis simulation with coaching interventions",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@contextmanager
def domain_errors() -> Generator[None, None, None]:
    """Translate simulator errors into HTTP status codes."""
    try:
        yield
    except MatchNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MatchStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidInstructionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except MatchConfigError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ---------- Request/Response models ----------


class StatsIn(BaseModel):
    serve: float = Field(..., ge=10, le=100)
    receive: float = Field(..., ge=10, le=100)
    volley: float = Field(..., ge=10, le=100)
    stroke: float = Field(..., ge=10, le=100)
    mental: float = Field(..., ge=10, le=100)
    stamina: float = Field(..., ge=10, le=100)


class PlayerIn(BaseModel):
    id: str | None = Field(None, description="Defaults to a generated id")
    name: str = Field(..., min_length=1, max_length=100)
    stats: StatsIn
    ability_ids: list[str] = Field(default_factory=list, description="Ids from GET /abilities")


class CreateMatchRequest(BaseModel):
    home: PlayerIn | None = Field(None, description="Omit to generate a random player")
    away: PlayerIn | None = Field(None, description="Omit to generate a random player")
    level: float = Field(70, ge=10, le=100, description="Level for generated players")
    seed: int | None = Field(None, description="RNG seed for reproducibility")
    # Checked by MatchConfig.validate(); failures map to 422.
    sets_to_win: int = 2
    games_per_set: int = 6
    tiebreak_enabled: bool = True
    tiebreak_points: int = 7
    coach_budget: int = 3
    coach_system_enabled: bool = True
    instruction_choices: int = 5


class AdvanceRequest(BaseModel):
    points: int = Field(1, ge=1, le=1000, description="Max points to play; stops early at an opportunity")


class InterventionRequest(BaseModel):
    instruction_id: str | None = Field(None, description="Offered instruction id; null to skip")


class AutoPlayRequest(BaseModel):
    mode: AutoPlayMode = AutoPlayMode.TO_INTERVENTION
    max_points: int | None = Field(None, ge=1)


def _build_player(body: PlayerIn, side: str) -> Player:
    abilities = []
    for ability_id in body.ability_ids:
        ability = get_ability(ability_id)
        if ability is None:
            raise HTTPException(status_code=400, detail=f"Unknown ability: {ability_id}")
        abilities.append(ability)
    return Player(
        id=body.id or f"{side}-{body.name.lower().replace(' ', '-')}",
        name=body.name,
        stats=PlayerStats(**body.stats.model_dump()),
        special_abilities=abilities,
    )


def _outcome_to_dict(outcome) -> dict[str, Any]:
    if isinstance(outcome, InterventionOpportunity):
        return {"kind": "opportunity", **outcome.to_dict()}
    return {"kind": "point", **outcome.to_dict()}


# ---------- Catalogs ----------


@app.get("/instructions")
def get_instructions() -> list[dict[str, Any]]:
    return [i.to_dict() for i in list_instructions()]


@app.get("/abilities")
def get_abilities() -> list[dict[str, Any]]:
    return [a.to_dict() for a in list_abilities()]


# ---------- Matches ----------


@app.post("/matches", status_code=201)
def create_match(req: CreateMatchRequest) -> dict[str, Any]:
    """Start a match. Missing players are generated from the seed."""
    seed = req.seed if req.seed is not None else DEFAULT_SEED
    gen_rng = derived_rng(seed, PLAYER_SEED_OFFSET)
    home = _build_player(req.home, "home") if req.home else generate_random_player(gen_rng, req.level)
    away = _build_player(req.away, "away") if req.away else generate_random_player(gen_rng, req.level)
    config = MatchConfig(
        sets_to_win=req.sets_to_win,
        games_per_set=req.games_per_set,
        tiebreak_enabled=req.tiebreak_enabled,
        coach_budget=req.coach_budget,
        coach_system_enabled=req.coach_system_enabled,
        tiebreak_points=req.tiebreak_points,
        instruction_choices=req.instruction_choices,
    )
    with domain_errors():
        session = store.create(home, away, config, seed=seed)
        with store.locked(session.id):
            d = session.to_dict()
    d["ratings"] = {
        "home": round(calculate_player_rating(home), 1),
        "away": round(calculate_player_rating(away), 1),
    }
    return d


@app.get("/matches/{match_id}")
def get_match(match_id: str) -> dict[str, Any]:
    with domain_errors(), store.locked(match_id) as session:
        return session.to_dict()


@app.delete("/matches/{match_id}", status_code=204)
def delete_match(match_id: str) -> None:
    with domain_errors():
        store.delete(match_id)


@app.post("/matches/{match_id}/advance")
def advance_match(match_id: str, req: AdvanceRequest | None = None) -> dict[str, Any]:
    """
    Play up to `points` points. The response lists each outcome; if the last
    one is an opportunity the match is paused until POST /intervention.
    """
    req = req or AdvanceRequest()
    with domain_errors(), store.locked(match_id) as session:
        outcomes = store.advance(match_id, req.points)
        return {
            "outcomes": [_outcome_to_dict(o) for o in outcomes],
            "match": session.to_dict(),
        }


@app.get("/matches/{match_id}/choices")
def get_choices(match_id: str) -> dict[str, Any]:
    with domain_errors(), store.locked(match_id) as session:
        opportunity = session.state.pending_opportunity
        if opportunity is None:
            raise MatchStateError("No intervention is pending")
        choices = store.choices(match_id)
        return {
            "opportunity": opportunity.to_dict(),
            "choices": [c.to_dict() for c in choices],
            "coach_budget_remaining": session.state.coach_budget_remaining,
        }


@app.post("/matches/{match_id}/intervention")
def post_intervention(match_id: str, req: InterventionRequest) -> dict[str, Any]:
    with domain_errors(), store.locked(match_id) as session:
        ack = store.intervene(match_id, req.instruction_id)
        return {"ack": ack.to_dict(), "match": session.to_dict()}


@app.post("/matches/{match_id}/autoplay")
def autoplay_match(match_id: str, req: AutoPlayRequest) -> dict[str, Any]:
    """Fast-forward: to the next opportunity, or to the end skipping every opportunity."""
    with domain_errors(), store.locked(match_id) as session:
        played, outcome = store.autoplay(match_id, req.mode, req.max_points)
        return {
            "reason": outcome.reason.value,
            "points": [p.to_dict() for p in played],
            "opportunity": outcome.opportunity.to_dict() if outcome.opportunity else None,
            "match": session.to_dict(),
        }


@app.get("/matches/{match_id}/summary")
def get_summary(match_id: str) -> dict[str, Any]:
    with domain_errors(), store.locked(match_id) as session:
        if not session.state.is_match_complete:
            raise MatchStateError("Match is not complete yet")
        return store.summary(match_id).to_dict()


@app.websocket("/ws/matches/{match_id}")
async def websocket_match(websocket: WebSocket, match_id: str):
    """
    Stream points live until the next opportunity (or the end). Server sends
    {kind: "point" | "opportunity", ...} messages then {kind: "paused" | "completed"}.
    """
    await websocket.accept()
    try:
        session = store.get(match_id)
    except MatchNotFoundError as e:
        await websocket.send_json({"kind": "error", "detail": str(e)})
        await websocket.close()
        return
    cfg = AutoPlayConfig(mode=AutoPlayMode.TO_INTERVENTION, seconds_per_point=AUTOPLAY_SECONDS_PER_POINT)
    try:
        with session.lock:
            pending = session.state.pending_opportunity is not None
        if not pending:
            async for outcome in async_auto_play(session.orchestrator, cfg, lock=session.lock):
                await websocket.send_json(_outcome_to_dict(outcome))
        with session.lock:
            status = "completed" if session.state.is_match_complete else "paused"
            final = {"kind": status, "match": session.to_dict()}
        await websocket.send_json(final)
        await websocket.close()
    except MatchStateError as e:
        await websocket.send_json({"kind": "error", "detail": str(e)})
        await websocket.close()
    except WebSocketDisconnect:
        logger.info("Client left live stream for %s", match_id)


# ---------- Run with: uvicorn tennis_coach.api:app --reload ----------
