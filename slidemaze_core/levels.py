from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Tuple

from .layouts import curated_for_level

MAX_LEVEL = 250
BASE_GRID_SIZE = 4
BASE_SEED = 1000
SEED_STEP = 7

# Stage bands, 50 levels each, in play order.
PLANET = 'planet'
ICE = 'ice'
SOIL = 'soil'
SAND = 'sand'
LAVA = 'lava'

STAGES: Tuple[str, ...] = (PLANET, ICE, SOIL, SAND, LAVA)
LEVELS_PER_STAGE = 50

# fastest lava pace; a level may slow it so its winning route stays open
LAVA_MOVES_PER_ROW = 3

_STAGE_RANGES: Dict[str, Tuple[int, int]] = {
    stage: (i * LEVELS_PER_STAGE + 1, (i + 1) * LEVELS_PER_STAGE) for i, stage in enumerate(STAGES)
}


@dataclass(frozen=True)
class LevelParams:
    """Generation parameters for one level."""
    grid_size: int
    complexity: float
    seed: int


def clamp_level(level: int) -> int:
    return max(1, min(int(level), MAX_LEVEL))


def level_seed(level: int) -> int:
    """Seed used for a level; curated levels get their reserved seed."""
    curated = curated_for_level(level)
    if curated is not None:
        return curated.seed
    return BASE_SEED + level * SEED_STEP


def get_level_config(level: int) -> LevelParams:
    """Maps a level number to its generation parameters. The grid grows every 3 levels."""
    grid_size = BASE_GRID_SIZE + level // 3
    complexity = min(0.3 + level * 0.05, 0.8)
    return LevelParams(grid_size=grid_size, complexity=complexity, seed=level_seed(level))


def calculate_move_limit(solution_length: int, level: int) -> int:
    """Move budget: solution plus a 30% buffer shrinking with level, never below solution + 2."""
    buffer = math.ceil(solution_length * 0.3)
    penalty = math.floor(level * 0.5)
    return max(solution_length + buffer - penalty, solution_length + 2)


def get_stage(level: int) -> str:
    level = clamp_level(level)
    return STAGES[(level - 1) // LEVELS_PER_STAGE]


def stage_range(stage: str) -> Tuple[int, int]:
    return _STAGE_RANGES[stage]


def to_stage_local_level(level: int) -> int:
    start, _ = stage_range(get_stage(level))
    return clamp_level(level) - start + 1
