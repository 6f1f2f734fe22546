from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from .errors import InvalidActionError
from .moves import DIRECTIONS, Direction


@dataclass(frozen=True)
class Move:
    direction: Direction


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Restart:
    pass


@dataclass(frozen=True)
class NextLevel:
    pass


@dataclass(frozen=True)
class LoadLevel:
    level: int
    seed: Optional[int] = None


@dataclass(frozen=True)
class Tick:
    seconds: float


@dataclass(frozen=True)
class SandRevealTick:
    seconds: float


Action = Union[Move, Undo, Restart, NextLevel, LoadLevel, Tick, SandRevealTick]


def _number(payload: Mapping[str, Any], key: str) -> float:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidActionError(f"'{key}' must be a number")
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise InvalidActionError(f"'{key}' must be finite")
    return number


def action_from_dict(payload: Mapping[str, Any]) -> Action:
    """Parses the wire form, e.g. {"type": "MOVE", "direction": "up"}."""
    if not isinstance(payload, Mapping):
        raise InvalidActionError('action must be an object')
    kind = payload.get('type')
    if kind == 'MOVE':
        direction = payload.get('direction')
        if direction not in DIRECTIONS:
            raise InvalidActionError(f"unknown direction: {direction!r}")
        return Move(direction)
    if kind == 'UNDO':
        return Undo()
    if kind == 'RESTART':
        return Restart()
    if kind == 'NEXT_LEVEL':
        return NextLevel()
    if kind == 'LOAD_LEVEL':
        level = int(_number(payload, 'level'))
        seed = payload.get('seed')
        if seed is not None:
            seed = int(_number(payload, 'seed'))
        return LoadLevel(level=level, seed=seed)
    if kind == 'TICK':
        return Tick(_number(payload, 'seconds'))
    if kind == 'SAND_REVEAL_TICK':
        return SandRevealTick(_number(payload, 'seconds'))
    raise InvalidActionError(f"unknown action type: {kind!r}")


def action_to_dict(action: Action) -> Dict[str, Any]:
    if isinstance(action, Move):
        return {'type': 'MOVE', 'direction': action.direction}
    if isinstance(action, Undo):
        return {'type': 'UNDO'}
    if isinstance(action, Restart):
        return {'type': 'RESTART'}
    if isinstance(action, NextLevel):
        return {'type': 'NEXT_LEVEL'}
    if isinstance(action, LoadLevel):
        out: Dict[str, Any] = {'type': 'LOAD_LEVEL', 'level': action.level}
        if action.seed is not None:
            out['seed'] = action.seed
        return out
    if isinstance(action, Tick):
        return {'type': 'TICK', 'seconds': action.seconds}
    if isinstance(action, SandRevealTick):
        return {'type': 'SAND_REVEAL_TICK', 'seconds': action.seconds}
    raise InvalidActionError(f"not an action: {action!r}")
