from __future__ import annotations

import logging
from collections import deque
from dataclasses import replace
from typing import Deque, Dict, Hashable, List, Optional, Tuple

from .generator import DELTAS, SlideStep, slide_search
from .hazards import rules_for_stage
from .moves import DIRECTION_DELTAS, DIRECTIONS, Direction, apply_move
from .state import GameState, Status

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 200_000

_DIRECTION_FOR_DELTA: Dict[Tuple[int, int], Direction] = {d: name for name, d in DIRECTION_DELTAS.items()}


def _route(state: GameState) -> Optional[List[SlideStep]]:
    return slide_search(
        state.grid, state.player_pos, state.exit_pos, state.coins, state.doors, state.collected_coins
    )


def plan(state: GameState) -> Optional[List[Direction]]:
    """Fewest slides to a win under walls, edges and door gating only."""
    route = _route(state)
    if route is None:
        return None
    return [_DIRECTION_FOR_DELTA[DELTAS[index]] for index, _ in route]


def _follow(state: GameState) -> Optional[List[Direction]]:
    """Plays the plan through apply_move, planning again whenever a slide stops short."""
    moves: List[Direction] = []
    while state.status == Status.PLAYING:
        route = _route(state)
        if not route:
            return None
        for index, stop in route:
            direction = _DIRECTION_FOR_DELTA[DELTAS[index]]
            nxt = apply_move(state, direction)
            if nxt is state:
                return None
            moves.append(direction)
            state = nxt
            if state.status != Status.PLAYING or state.player_pos != stop:
                break
    return moves if state.status == Status.WON else None


def _search(state: GameState) -> Optional[List[Direction]]:
    """Breadth-first search driven by apply_move, so every stage rule and the move budget apply."""
    rules = rules_for_stage(state.stage)
    start = replace(state, history=())
    start_key = rules.search_key(start)
    parent: Dict[Hashable, Optional[Tuple[Hashable, Direction]]] = {start_key: None}
    queue: Deque[Tuple[Hashable, GameState]] = deque([(start_key, start)])
    while queue:
        key, current = queue.popleft()
        for direction in DIRECTIONS:
            nxt = apply_move(current, direction)
            if nxt is current:
                continue
            nxt = replace(nxt, history=())
            nxt_key = rules.search_key(nxt)
            if nxt_key in parent:
                continue
            parent[nxt_key] = (key, direction)
            if nxt.status == Status.WON:
                moves: List[Direction] = []
                link = parent[nxt_key]
                while link is not None:
                    prev, move = link
                    moves.append(move)
                    link = parent[prev]
                moves.reverse()
                return moves
            if nxt.status == Status.PLAYING:
                queue.append((nxt_key, nxt))
        if len(parent) > SEARCH_LIMIT:
            logger.warning("Search gave up on level %d after %d states", state.level, len(parent))
            return None
    return None


def solve(state: GameState) -> Optional[List[Direction]]:
    """
    A winning line from the current state, or None when there is none or the
    game is already over. The fewest-slides plan is followed first, planned
    again from wherever a hazard stops a slide early; if that does not win,
    the line comes from a search through the stage's own move rules and the
    remaining move budget.
    """
    if state.status == Status.WON:
        return []
    if state.status != Status.PLAYING:
        return None
    moves = _follow(state)
    if moves is not None:
        return moves
    return _search(state)


def hint(state: GameState) -> Optional[Direction]:
    """First move of a winning line, if there is one."""
    moves = solve(state)
    if not moves:
        return None
    return moves[0]
