from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Optional

from .actions import Action, LoadLevel, Move, NextLevel, Restart, SandRevealTick, Tick, Undo
from .generator import generate_maze
from .hazards import rules_for_stage
from .levels import MAX_LEVEL, calculate_move_limit, clamp_level, get_level_config, get_stage
from .moves import apply_move, undo
from .state import GameState, Status

logger = logging.getLogger(__name__)


def create_level(level: int, seed: Optional[int] = None) -> GameState:
    """Builds the initial state of a level. A pinned seed reproduces a stored run."""
    level = clamp_level(level)
    params = get_level_config(level)
    if seed is not None:
        params = replace(params, seed=int(seed))
    layout = generate_maze(params, level)
    # room for the slide route plus one checkpoint stop
    route_moves = max(0, len(layout.slide_route) - 1)
    max_moves = max(calculate_move_limit(layout.solution_length, level), route_moves + 2)
    stage = get_stage(level)
    hazard_fields = rules_for_stage(stage).setup(layout, level, params.seed)
    logger.debug("Created level %d (seed %d, stage %s, %dx%d, %d moves)",
                 level, params.seed, stage, layout.grid.width, layout.grid.height, max_moves)
    return GameState(
        level=level,
        grid=layout.grid,
        start_pos=layout.start_pos,
        player_pos=layout.start_pos,
        exit_pos=layout.exit_pos,
        coins=layout.coins,
        doors=layout.doors,
        collected_coins=frozenset(),
        moves_left=max_moves,
        max_moves=max_moves,
        status=Status.PLAYING,
        history=(),
        seed=params.seed,
        stage=stage,
        **hazard_fields,
    )


def restart(state: GameState) -> GameState:
    """Same level, same seed, fresh run."""
    return create_level(state.level, state.seed)


def next_level(state: GameState) -> GameState:
    return create_level(min(state.level + 1, MAX_LEVEL))


def tick(state: GameState, seconds: float) -> GameState:
    """Runs the countdown down; only once it has started and while playing."""
    if state.status != Status.PLAYING or state.time_left is None or not state.timer_started:
        return state
    if not math.isfinite(seconds) or seconds <= 0:
        return state
    time_left = max(0.0, state.time_left - seconds)
    status = Status.LOST if time_left <= 0 else state.status
    return replace(state, time_left=time_left, status=status)


def sand_reveal_tick(state: GameState, seconds: float) -> GameState:
    """Shrinks the sand reveal window."""
    if state.status != Status.PLAYING or state.sand_reveal_seconds <= 0:
        return state
    if not math.isfinite(seconds) or seconds <= 0:
        return state
    return replace(state, sand_reveal_seconds=max(0.0, state.sand_reveal_seconds - seconds))


def game_reducer(state: GameState, action: Action) -> GameState:
    """Pure dispatch over the action vocabulary; unknown actions leave the state unchanged."""
    if isinstance(action, Move):
        return apply_move(state, action.direction)
    if isinstance(action, Undo):
        return undo(state)
    if isinstance(action, Restart):
        return restart(state)
    if isinstance(action, NextLevel):
        return next_level(state)
    if isinstance(action, LoadLevel):
        return create_level(action.level, action.seed)
    if isinstance(action, Tick):
        return tick(state, action.seconds)
    if isinstance(action, SandRevealTick):
        return sand_reveal_tick(state, action.seconds)
    return state
