"""
State Selectors
Read-only views over a GameState; nothing here builds a new state.
"""
from __future__ import annotations

from typing import List, Optional

from .board import WALL, Position
from .hazards import SOIL_COLLAPSE_VISITS
from .state import GameState, Status


def get_cell_type(state: GameState, x: int, y: int) -> str:
    """'player', 'exit', 'coin-<color>' (uncollected), 'door-<color>' (locked), else 'wall'/'path'.
    Coordinates off the grid read as 'wall'."""
    if not state.grid.in_bounds(x, y):
        return WALL
    pos = Position(x, y)
    if pos == state.player_pos:
        return 'player'
    if pos == state.exit_pos:
        return 'exit'
    coin = state.coin_at(pos)
    if coin is not None and pos not in state.collected_coins:
        return f"coin-{coin.color}"
    door = state.door_at(pos)
    if door is not None and state.is_door_locked(door):
        return f"door-{door.color}"
    return state.grid.at(x, y)


def can_undo(state: GameState) -> bool:
    return len(state.history) > 0 and state.status == Status.PLAYING


def get_progress(state: GameState) -> float:
    """Percentage of the move budget already spent."""
    if state.max_moves <= 0:
        return 0.0
    return (state.max_moves - state.moves_left) / state.max_moves * 100


def get_grid_for_render(state: GameState) -> List[List[str]]:
    # player and exit are drawn separately
    return state.grid.to_rows()


def coins_remaining(state: GameState) -> int:
    return sum(1 for coin in state.coins if coin.position not in state.collected_coins)


def is_cell_visible(state: GameState, x: int, y: int) -> bool:
    """Under a sand storm only the 3x3 block around the player shows, unless a reveal is running."""
    if not state.sand_storm_active or state.sand_reveal_seconds > 0:
        return True
    return abs(x - state.player_pos.x) <= 1 and abs(y - state.player_pos.y) <= 1


def is_lava_cell(state: GameState, x: int, y: int) -> bool:
    return state.lava_row is not None and y <= state.lava_row


def lava_warning_row(state: GameState) -> Optional[int]:
    """The row the lava takes on the next move, if it advances then."""
    if state.lava_row is None or state.lava_row >= state.grid.height - 1:
        return None
    if state.lava_move_counter >= state.lava_moves_per_row - 1:
        return state.lava_row + 1
    return None


def is_cell_cracked(state: GameState, x: int, y: int) -> bool:
    """Soil one visit away from collapsing."""
    pos = Position(x, y)
    if pos in state.soil_bedrock:
        return False
    return state.soil_visit_count(pos) == SOIL_COLLAPSE_VISITS - 1
