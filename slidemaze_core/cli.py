from __future__ import annotations

import argparse
import logging
import os

from .actions import Move, NextLevel, Restart, Undo
from .moves import DOWN, LEFT, RIGHT, UP
from .reducer import create_level, game_reducer
from .selectors import coins_remaining
from .solver import hint, solve
from .state import GameState, Status

KEYS = {
    'w': Move(UP),
    'a': Move(LEFT),
    's': Move(DOWN),
    'd': Move(RIGHT),
    'u': Undo(),
    'r': Restart(),
    'n': NextLevel(),
}


def render(state: GameState) -> str:
    board = state.grid.pretty(
        player=state.player_pos,
        exit_pos=state.exit_pos,
        coins=state.coins,
        doors=state.doors,
        collected=set(state.collected_coins),
    )
    footer = (f"Level {state.level} ({state.stage})  moves {state.moves_left}/{state.max_moves}  "
              f"coins left {coins_remaining(state)}  status {state.status}")
    if state.time_left is not None:
        footer += f"  time {state.time_left:.0f}s"
    return board + "\n" + footer


def main() -> None:
    parser = argparse.ArgumentParser(description='Slidemaze: sliding maze puzzle in the terminal')
    parser.add_argument('--level', type=int, default=1, help='Level to start (1-250)')
    parser.add_argument('--seed', type=int, default=None, help='Pin the generation seed')
    parser.add_argument('--play', action='store_true', help='Play interactively')
    parser.add_argument('--solve', action='store_true', help='Print a shortest slide solution')
    parser.add_argument('--log-level', default=os.getenv('SLIDEMAZE_LOG_LEVEL', 'WARNING'),
                        help='Logging level (DEBUG, INFO, ...)')
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    state = create_level(args.level, args.seed)
    print(render(state))

    if args.solve:
        moves = solve(state)
        if moves is None:
            print('\nNo slide solution found.')
        else:
            print(f"\nSolution in {len(moves)} moves:", ' '.join(moves))
        return

    if not args.play:
        return

    print('Keys: w/a/s/d move, u undo, r restart, n next level, h hint, q quit')
    while True:
        text = input('> ').strip().lower()
        if text == 'q':
            break
        if text == 'h':
            direction = hint(state)
            print('Hint:', direction if direction is not None else 'none')
            continue
        action = KEYS.get(text)
        if action is None:
            print('Unknown key. Try again.')
            continue
        state = game_reducer(state, action)
        print(render(state))
        if state.status == Status.WON:
            print('You escaped! Press n for the next level.')
        elif state.status == Status.LOST:
            print('Out of luck. Press u to undo or r to restart.')
