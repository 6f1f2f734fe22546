from __future__ import annotations

# Facade module that re-exports Slidemaze core functionality.
# Used by the Flask app and tests; single-responsibility modules live under slidemaze_core/*.

from slidemaze_core.board import (  # noqa: F401
    COLORS,
    PATH,
    WALL,
    Coin,
    Door,
    Grid,
    Position,
)
from slidemaze_core.rng import SeededRandom  # noqa: F401
from slidemaze_core.levels import (  # noqa: F401
    ICE,
    LAVA,
    MAX_LEVEL,
    PLANET,
    SAND,
    SOIL,
    STAGES,
    LevelParams,
    calculate_move_limit,
    clamp_level,
    get_level_config,
    get_stage,
    stage_range,
    to_stage_local_level,
)
from slidemaze_core.layouts import (  # noqa: F401
    CURATED_LEVELS,
    CuratedLevel,
    build_curated_grid,
    curated_for_level,
    curated_for_seed,
    snake_grid,
)
from slidemaze_core.generator import (  # noqa: F401
    MazeLayout,
    distance_map,
    generate_maze,
    place_coins_and_doors,
    shortest_path,
    shortest_path_length,
    shortest_slide_path,
    slide_destination,
    slide_route_cells,
    slide_search,
)
from slidemaze_core.state import GameState, HistoryEntry, Status  # noqa: F401
from slidemaze_core.hazards import (  # noqa: F401
    LAVA_MOVES_PER_ROW,
    SAND_REVEAL_SECONDS,
    SOIL_COLLAPSE_VISITS,
    HazardRules,
    lava_pace,
    rules_for_stage,
)
from slidemaze_core.moves import (  # noqa: F401
    DIRECTIONS,
    DOWN,
    LEFT,
    RIGHT,
    UP,
    apply_move,
    legal_directions,
    step,
    undo,
)
from slidemaze_core.actions import (  # noqa: F401
    LoadLevel,
    Move,
    NextLevel,
    Restart,
    SandRevealTick,
    Tick,
    Undo,
    action_from_dict,
    action_to_dict,
)
from slidemaze_core.reducer import (  # noqa: F401
    create_level,
    game_reducer,
    next_level,
    restart,
    sand_reveal_tick,
    tick,
)
from slidemaze_core.selectors import (  # noqa: F401
    can_undo,
    coins_remaining,
    get_cell_type,
    get_grid_for_render,
    get_progress,
    is_cell_cracked,
    is_cell_visible,
    is_lava_cell,
    lava_warning_row,
)
from slidemaze_core.solver import hint, plan, solve  # noqa: F401
from slidemaze_core.db import (  # noqa: F401
    Progress,
    ProgressStore,
    record_completion,
)
from slidemaze_core.errors import (  # noqa: F401
    InvalidActionError,
    InvalidStateError,
    MazeGenerationError,
    SlidemazeError,
)


def main() -> None:
    # CLI driver delegated to slidemaze_core.cli
    from slidemaze_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()
