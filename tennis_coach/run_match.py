"""
Play a coached match between two generated players in the terminal.
Each point is printed with the live score; at every intervention the coach
(automatic, skipping or interactive) picks an instruction or passes.
"""
from __future__ import annotations

import argparse
import random

from tennis_coach.config import AUTOPLAY_SECONDS_PER_POINT
from tennis_coach.instructions import generate_instruction_choices
from tennis_coach.logging_config import setup_logging
from tennis_coach.players import calculate_player_rating, generate_preset_players
from tennis_coach.simulation.autoplay import AutoPlayConfig, AutoPlayer, AutoPlayMode
from tennis_coach.simulation.orchestrator import MatchOrchestrator, initialize_match
from tennis_coach.simulation.rng import SeededRNG
from tennis_coach.simulation.schemas import (
    CoachInstruction,
    InterventionOpportunity,
    MatchConfig,
    PointResult,
    Side,
)
from tennis_coach.simulation.state_tracker import MatchState
from tennis_coach.simulation.summary import summarize_match


def _print_point(result: PointResult, names: dict[Side, str]) -> None:
    marker = " *" if result.was_influenced_by_instruction else ""
    print(f"  Point {result.point_number + 1:>3} → {names[result.winner]} ({result.reason.value}){marker}   {result.score_after}")


def _print_opportunity(opportunity: InterventionOpportunity, state: MatchState) -> None:
    print()
    print(f"  !! {opportunity.type.value.upper()}: {opportunity.description} (urgency {opportunity.urgency})")
    print(f"     Coach budget left: {state.coach_budget_remaining}")


def _auto_coach(choice_rng: SeededRNG):
    def decide(state: MatchState, opportunity: InterventionOpportunity) -> CoachInstruction | None:
        choices = generate_instruction_choices(
            opportunity, state.used_instructions, choice_rng, state.config.instruction_choices
        )
        pick = choices[0] if choices else None
        print(f"     Coach calls: {pick.name if pick else 'nothing'}")
        return pick
    return decide


def _interactive_coach(choice_rng: SeededRNG):
    def decide(state: MatchState, opportunity: InterventionOpportunity) -> CoachInstruction | None:
        choices = generate_instruction_choices(
            opportunity, state.used_instructions, choice_rng, state.config.instruction_choices
        )
        for i, c in enumerate(choices, start=1):
            print(f"     [{i}] {c.name:<20} {c.category.value:<10} {int(c.success_rate * 100)}%  {c.description}")
        print("     [0] Skip")
        while True:
            raw = input("     Choice: ").strip() or "0"
            if raw.isdigit() and 0 <= int(raw) <= len(choices):
                break
            print("     Enter a number from the list.")
        return choices[int(raw) - 1] if int(raw) > 0 else None
    return decide


def _print_final(state: MatchState, orch: MatchOrchestrator, names: dict[Side, str]) -> None:
    result = summarize_match(state, orch.history)
    if result.winner is None:
        return
    loser = result.winner.other
    sets = "  ".join(f"{s.home}-{s.away}" for s in result.sets)
    print()
    print("=" * 60)
    print(f"  MATCH RESULT: {names[result.winner]} def. {names[loser]}  {sets}")
    print("=" * 60)
    print(f"  Points won: {names[Side.HOME]} {result.total_points[0]}  |  {names[Side.AWAY]} {result.total_points[1]}")
    print(f"  Interventions used: {result.interventions_used}")
    if result.mvp is not None:
        print(f"  MVP: {names[result.mvp]}")
    print()


def run(
    seed: int | None = None,
    coach: str = "auto",
    fast: bool = False,
    sets_to_win: int = 2,
) -> MatchState:
    if seed is None:
        seed = random.randint(1, 2**31 - 1)
    rng = SeededRNG(seed)
    home, away = generate_preset_players(rng)
    state = initialize_match(home, away, MatchConfig(sets_to_win=sets_to_win))
    orch = MatchOrchestrator(state, rng=rng)
    names = {Side.HOME: home.name, Side.AWAY: away.name}

    choice_rng = SeededRNG(seed + 1)
    decide = {
        "auto": _auto_coach(choice_rng),
        "interactive": _interactive_coach(choice_rng),
        "skip": None,
    }[coach]
    player = AutoPlayer(
        orch,
        AutoPlayConfig(
            mode=AutoPlayMode.NORMAL if decide else AutoPlayMode.TO_END,
            seconds_per_point=AUTOPLAY_SECONDS_PER_POINT,
            fast_forward=fast,
        ),
        decide=decide,
        on_point=lambda r: _print_point(r, names),
        on_opportunity=lambda o: _print_opportunity(o, state),
    )
    print(f"\n  {home.name} ({calculate_player_rating(home):.0f})  vs  {away.name} ({calculate_player_rating(away):.0f})"
          f"  [first to {sets_to_win} sets, seed={seed}, coach={coach}]")
    print("  " + "-" * 56)
    try:
        player.run()
    except KeyboardInterrupt:
        player.cancel()
        print("\n  Match abandoned.")
        return state
    _print_final(state, orch, names)
    return state


def main():
    parser = argparse.ArgumentParser(description="Run a coached tennis match with live scoring.")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for reproducibility")
    parser.add_argument("--coach", choices=("auto", "skip", "interactive"), default="auto", help="Who answers interventions")
    parser.add_argument("--sets", type=int, default=2, help="Sets needed to win")
    parser.add_argument("--fast", action="store_true", help="No delay between points")
    parser.add_argument("--log-level", default="WARNING", help="Console log level")
    args = parser.parse_args()
    setup_logging(args.log_level)
    run(seed=args.seed, coach=args.coach, fast=args.fast, sets_to_win=args.sets)


if __name__ == "__main__":
    main()
