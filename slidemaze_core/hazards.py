from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Optional, Sequence, Set

from .board import Grid, Position
from .generator import MazeLayout, shortest_path, slide_route_cells
from .levels import ICE, LAVA, LAVA_MOVES_PER_ROW, PLANET, SAND, SOIL
from .rng import SeededRandom
from .state import GameState, Status

ICY_FRACTION = 5  # about one path cell in five is icy
MIN_ICE_SECONDS = 30.0
ICE_SECONDS_PER_STEP = 3.0
SOIL_COLLAPSE_VISITS = 3
SAND_REVEAL_SECONDS = 5.0


@dataclass
class Slide:
    """Working copy of the mutable parts of a state while one move is evaluated."""
    state: GameState
    pos: Position
    grid: Grid
    collected: Set[Position]
    soil_visits: Dict[Position, int]
    moves_left: int
    time_left: Optional[float]
    timer_started: bool
    sand_checkpoint: Optional[Position]
    sand_reveal_seconds: float
    lava_row: Optional[int]
    lava_move_counter: int
    last_move_icy: bool = False

    @classmethod
    def begin(cls, state: GameState) -> 'Slide':
        return cls(
            state=state,
            pos=state.player_pos,
            grid=state.grid,
            collected=set(state.collected_coins),
            soil_visits=state.soil_visits_map(),
            moves_left=state.moves_left,
            time_left=state.time_left,
            timer_started=state.timer_started,
            sand_checkpoint=state.sand_checkpoint,
            sand_reveal_seconds=state.sand_reveal_seconds,
            lava_row=state.lava_row,
            lava_move_counter=state.lava_move_counter,
        )


class HazardRules:
    """
    Stage-specific rules layered onto the slide. The move engine calls, in order:
    on_enter for every cell the player slides into (True halts the slide there),
    after_move once the slide is final, then outcome, whose non-None status
    overrides the normal win/loss check.
    """
    stage = PLANET

    def setup(self, layout: MazeLayout, level: int, seed: int) -> Dict[str, Any]:
        """Initial hazard fields for a fresh GameState."""
        return {}

    def on_enter(self, slide: Slide, pos: Position) -> bool:
        return False

    def after_move(self, slide: Slide) -> None:
        return None

    def outcome(self, slide: Slide) -> Optional[str]:
        return None

    def search_key(self, state: GameState) -> Hashable:
        """The parts of a state that decide which moves can still win."""
        return state.player_pos, state.collected_coins


class IceRules(HazardRules):
    """Icy cells only flag the move for slower animation; a countdown starts on the first move."""
    stage = ICE

    def setup(self, layout: MazeLayout, level: int, seed: int) -> Dict[str, Any]:
        candidates = [p for p in layout.grid.path_cells() if p != layout.start_pos and p != layout.exit_pos]
        icy = SeededRandom(seed).shuffle(candidates)[:len(candidates) // ICY_FRACTION]
        max_time = max(MIN_ICE_SECONDS, ICE_SECONDS_PER_STEP * layout.solution_length)
        return {'icy_cells': frozenset(icy), 'time_left': max_time, 'max_time': max_time}

    def on_enter(self, slide: Slide, pos: Position) -> bool:
        if pos in slide.state.icy_cells:
            slide.last_move_icy = True
        return False

    def after_move(self, slide: Slide) -> None:
        slide.timer_started = True


class SoilRules(HazardRules):
    """The third visit to an unprotected cell stops the slide there; the cell collapses once left."""
    stage = SOIL

    def setup(self, layout: MazeLayout, level: int, seed: int) -> Dict[str, Any]:
        visits: Dict[Position, int] = {}
        for cells in slide_route_cells(layout.slide_route):
            for pos in cells:
                visits[pos] = visits.get(pos, 0) + 1
        bedrock = frozenset(p for p, n in visits.items() if n >= SOIL_COLLAPSE_VISITS)
        return {'soil_visits': (), 'soil_bedrock': bedrock}

    @staticmethod
    def is_protected(state: GameState, pos: Position) -> bool:
        if pos == state.start_pos or pos == state.exit_pos or pos in state.soil_bedrock:
            return True
        return state.coin_at(pos) is not None or state.door_at(pos) is not None

    def on_enter(self, slide: Slide, pos: Position) -> bool:
        count = slide.soil_visits.get(pos, 0) + 1
        slide.soil_visits[pos] = count
        return count >= SOIL_COLLAPSE_VISITS and not self.is_protected(slide.state, pos)

    def after_move(self, slide: Slide) -> None:
        collapsing = [
            p for p, n in slide.soil_visits.items()
            if n >= SOIL_COLLAPSE_VISITS
            and p != slide.pos
            and slide.grid.is_path(p.x, p.y)
            and not self.is_protected(slide.state, p)
        ]
        slide.grid = slide.grid.with_walls(collapsing)

    def search_key(self, state: GameState) -> Hashable:
        # visit counts are left out, collapsed cells are in the grid
        return state.player_pos, state.collected_coins, state.grid


class SandRules(HazardRules):
    """Fog hides the maze; reaching the checkpoint stops the slide and opens a reveal window."""
    stage = SAND

    def setup(self, layout: MazeLayout, level: int, seed: int) -> Dict[str, Any]:
        path = shortest_path(layout.grid, layout.start_pos, layout.exit_pos)
        checkpoint = path[len(path) // 2] if len(path) > 2 else None
        return {'sand_storm_active': True, 'sand_checkpoint': checkpoint, 'sand_reveal_seconds': 0.0}

    def on_enter(self, slide: Slide, pos: Position) -> bool:
        if slide.sand_checkpoint is None or pos != slide.sand_checkpoint:
            return False
        slide.sand_checkpoint = None
        slide.sand_reveal_seconds = SAND_REVEAL_SECONDS
        return True

    def search_key(self, state: GameState) -> Hashable:
        return state.player_pos, state.collected_coins, state.sand_checkpoint


def _outruns_lava(moves: Sequence[List[Position]], pace: int) -> bool:
    for done, cells in enumerate(moves):
        if any(p.y <= done // pace for p in cells):
            return False
        if cells[-1].y <= (done + 1) // pace:
            return False
    return True


def lava_pace(route: Sequence[Position]) -> int:
    """
    Fastest moves-per-row at which lava never reaches the cells of route while
    it is being played. A pace longer than the route keeps the front at row 0
    until the route is done, so a value is always found.
    """
    moves = slide_route_cells(route)
    slowest = max(LAVA_MOVES_PER_ROW, len(moves) + 1)
    for pace in range(LAVA_MOVES_PER_ROW, slowest):
        if _outruns_lava(moves, pace):
            return pace
    return slowest


class LavaRules(HazardRules):
    """Lava fills the maze from the top, one row every lava_moves_per_row moves."""
    stage = LAVA

    def setup(self, layout: MazeLayout, level: int, seed: int) -> Dict[str, Any]:
        return {'lava_row': 0, 'lava_move_counter': 0, 'lava_moves_per_row': lava_pace(layout.slide_route)}

    def after_move(self, slide: Slide) -> None:
        if slide.lava_row is None:
            return
        slide.lava_move_counter += 1
        if slide.lava_move_counter >= slide.state.lava_moves_per_row:
            slide.lava_move_counter = 0
            slide.lava_row += 1
            slide.grid = slide.grid.with_wall_rows(slide.lava_row)

    def outcome(self, slide: Slide) -> Optional[str]:
        if slide.lava_row is not None and slide.pos.y <= slide.lava_row:
            return Status.LOST
        return None

    def search_key(self, state: GameState) -> Hashable:
        return state.player_pos, state.collected_coins, state.lava_row, state.lava_move_counter


HAZARDS: Dict[str, HazardRules] = {
    PLANET: HazardRules(),
    ICE: IceRules(),
    SOIL: SoilRules(),
    SAND: SandRules(),
    LAVA: LavaRules(),
}


def rules_for_stage(stage: str) -> HazardRules:
    return HAZARDS.get(stage, HAZARDS[PLANET])
