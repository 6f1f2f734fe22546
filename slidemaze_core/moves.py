from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from .board import Position
from .hazards import Slide, rules_for_stage
from .state import GameState, Status, freeze_visits

UP = 'up'
DOWN = 'down'
LEFT = 'left'
RIGHT = 'right'

Direction = str

DIRECTIONS: Tuple[Direction, ...] = (UP, DOWN, LEFT, RIGHT)

DIRECTION_DELTAS: Dict[Direction, Tuple[int, int]] = {
    UP: (0, -1),
    DOWN: (0, 1),
    LEFT: (-1, 0),
    RIGHT: (1, 0),
}


def step(pos: Position, direction: Direction) -> Position:
    """The neighbouring position one cell away in the given direction."""
    dx, dy = DIRECTION_DELTAS[direction]
    return Position(pos.x + dx, pos.y + dy)


def _can_enter(slide: Slide, pos: Position) -> bool:
    grid = slide.grid
    if not grid.in_bounds(pos.x, pos.y) or grid.is_wall(pos.x, pos.y):
        return False
    door = slide.state.door_at(pos)
    return door is None or not slide.state.is_door_locked(door, slide.collected)


def _resolve_status(slide: Slide, override: Optional[str]) -> str:
    state = slide.state
    if override is not None:
        return override
    if slide.pos == state.exit_pos and state.all_coins_collected(slide.collected):
        return Status.WON
    if slide.moves_left <= 0:
        return Status.LOST
    if slide.time_left is not None and slide.timer_started and slide.time_left <= 0:
        return Status.LOST
    return Status.PLAYING


def apply_move(state: GameState, direction: Direction) -> GameState:
    """
    Slides the player in a direction until a wall, the grid edge or a locked door.
    Coins passed are collected. A move that does not change the position is a
    no-op and consumes nothing; so is any move once the game is over.
    """
    if state.status != Status.PLAYING or direction not in DIRECTION_DELTAS:
        return state

    rules = rules_for_stage(state.stage)
    slide = Slide.begin(state)
    while True:
        nxt = step(slide.pos, direction)
        if not _can_enter(slide, nxt):
            break
        slide.pos = nxt
        if state.coin_at(nxt) is not None:
            slide.collected.add(nxt)
        if rules.on_enter(slide, nxt):
            break

    if slide.pos == state.player_pos:
        return state

    slide.moves_left = max(0, state.moves_left - 1)
    rules.after_move(slide)
    status = _resolve_status(slide, rules.outcome(slide))

    return replace(
        state,
        grid=slide.grid,
        player_pos=slide.pos,
        collected_coins=frozenset(slide.collected),
        moves_left=slide.moves_left,
        status=status,
        history=state.history + (state.snapshot(),),
        last_move_icy=slide.last_move_icy,
        time_left=slide.time_left,
        timer_started=slide.timer_started,
        soil_visits=freeze_visits(slide.soil_visits),
        sand_checkpoint=slide.sand_checkpoint,
        sand_reveal_seconds=slide.sand_reveal_seconds,
        lava_row=slide.lava_row,
        lava_move_counter=slide.lava_move_counter,
    )


def undo(state: GameState) -> GameState:
    """Pops the last snapshot. Undo also leaves a won or lost game, back to playing."""
    if not state.history:
        return state
    return state.restored(state.history[-1], state.history[:-1])


def legal_directions(state: GameState) -> List[Direction]:
    """Directions that would move the player right now."""
    return [d for d in DIRECTIONS if apply_move(state, d) is not state]
